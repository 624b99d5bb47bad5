import logging

from task_scheduler.core.graph import build_dependency_graph
from task_scheduler.core.model import Task
from task_scheduler.logging_config import LEVEL_ENV_VAR, LOGGER_NAME, setup_logging


def test_cycle_rejection_is_logged(caplog):
    tasks = [
        Task(id="A", description="a", dependencies=("B",)),
        Task(id="B", description="b", dependencies=("A",)),
    ]
    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        build_dependency_graph(tasks)
    assert any("would create a cycle" in r.getMessage() for r in caplog.records)


def test_unknown_dependency_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        build_dependency_graph([Task(id="D", description="d", dependencies=("X",))])
    assert any("unknown id X" in r.getMessage() for r in caplog.records)


def test_setup_logging_level_and_single_handler(monkeypatch):
    logger = logging.getLogger(LOGGER_NAME)
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    logger.handlers = []
    try:
        monkeypatch.setenv(LEVEL_ENV_VAR, "DEBUG")
        assert setup_logging().level == logging.DEBUG

        setup_logging("error")
        assert logger.level == logging.ERROR
        assert len(logger.handlers) == 1
    finally:
        logger.handlers = saved_handlers
        logger.setLevel(saved_level)

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from task_scheduler.core.config.scheduler_config import SchedulerConfigError, load_and_merge
from task_scheduler.core.errors import (
    SchedulerError,
    TaskLoadError,
    TaskValidationError,
    sort_errors,
)
from task_scheduler.core.graph import DependencyGraph, build_dependency_graph
from task_scheduler.core.graph.export import (
    analysis_to_dict,
    build_result_to_dict,
    critical_path_to_dict,
    group_to_dict,
    task_to_dict,
)
from task_scheduler.core.io.load_tasks import load_tasks
from task_scheduler.core.lint.lint_graph import lint_build
from task_scheduler.core.model import BuildResult, Task
from task_scheduler.core.validate.validate_tasks import summarize_tasks, validate_tasks
from task_scheduler.logging_config import LEVEL_ENV_VAR, setup_logging


app = typer.Typer(add_completion=False, no_args_is_help=True)

TOOL_NAME = "scheduler"


@app.callback()
def _callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level for engine diagnostics (DEBUG, INFO, WARNING, ...)"
    ),
) -> None:
    """Task dependency scheduler CLI."""
    if log_level or os.getenv(LEVEL_ENV_VAR):
        setup_logging(log_level)


@dataclass(frozen=True)
class _Loaded:
    file: str
    tasks: list[Task]
    graph: DependencyGraph
    result: BuildResult
    lint_errors: list[TaskValidationError]


def _to_item(e: SchedulerError) -> dict[str, Any]:
    if isinstance(e, TaskLoadError):
        source = "load"
    elif e.code.startswith("L_"):
        source = "lint"
    else:
        source = "validate"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.pointer,
        "task_id": e.task_id,
        "field": e.field,
        "severity": "error",
        "source": source,
    }


def _emit_json(
    command: str, ok: bool, errors: list[SchedulerError], exit_code: int, **extra: Any
) -> NoReturn:
    payload: dict[str, Any] = {
        "tool": TOOL_NAME,
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in errors],
    }
    payload.update(extra)
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _fail(command: str, format: str, errors: list[SchedulerError], exit_code: int) -> NoReturn:
    if format == "json":
        _emit_json(command, False, errors, exit_code)
    _print_errors(errors)
    raise typer.Exit(code=exit_code)


def _check_format(format: str) -> None:
    if format not in ("text", "json"):
        err = TaskValidationError(
            code="E_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _load(
    command: str, path: str, config_file: Optional[str], format: str, strict: bool = False
) -> _Loaded:
    """Load, validate and build; exits with the CLI's error conventions on failure."""
    _check_format(format)

    try:
        config = load_and_merge(config_file)
    except FileNotFoundError:
        _fail(
            command,
            format,
            [
                TaskLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config_file}",
                    file=None,
                    path="config",
                )
            ],
            1,
        )
    except SchedulerConfigError as e:
        _fail(
            command,
            format,
            [
                TaskValidationError(
                    code="E_CONFIG_FILE_INVALID",
                    message=str(e),
                    file=config_file,
                    path="config",
                )
            ],
            2,
        )

    try:
        doc = load_tasks(path)
    except TaskLoadError as e:
        _fail(command, format, [e], 1)

    tasks, errors = validate_tasks(doc)
    if errors or tasks is None:
        _fail(command, format, list(errors), 2)

    graph, result = build_dependency_graph(tasks, config)
    lint_errors = lint_build(result, file=doc["__file__"])
    if strict and lint_errors:
        _fail(command, format, list(lint_errors), 2)

    return _Loaded(
        file=doc["__file__"], tasks=tasks, graph=graph, result=result, lint_errors=lint_errors
    )


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
) -> None:
    """Validate a task file and report graph diagnostics (unknown deps, cycles, duplicate ids)."""
    loaded = _load("validate", path, config, format)

    if loaded.lint_errors:
        _fail("validate", format, list(loaded.lint_errors), 2)

    if format == "json":
        _emit_json(
            "validate",
            True,
            [],
            0,
            summary=build_result_to_dict(loaded.result),
        )

    typer.echo(summarize_tasks(loaded.tasks))
    edge_count = len(loaded.result.accepted_edges)
    typer.echo(f"Graph: {loaded.result.node_count} nodes, {edge_count} edges")


@app.command("schedule")
def schedule(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
    strict: bool = typer.Option(
        False, "--strict", help="Refuse to schedule when diagnostics exist"
    ),
) -> None:
    """Print one valid execution order (dependencies first, then lowest priority value)."""
    loaded = _load("schedule", path, config, format, strict=strict)
    tasks = loaded.graph.get_sorted_tasks()

    if format == "json":
        _emit_json(
            "schedule",
            True,
            [],
            0,
            order=[t.id for t in tasks],
            tasks=[task_to_dict(t) for t in tasks],
            diagnostics=build_result_to_dict(loaded.result),
        )

    _print_errors(list(loaded.lint_errors))
    for i, t in enumerate(tasks, start=1):
        typer.echo(f"{i}. {t.id} (priority={t.priority}, complexity={t.estimated_complexity})")


@app.command("critical-path")
def critical_path(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
) -> None:
    """Print the critical path and its total duration."""
    loaded = _load("critical-path", path, config, format)
    cp = loaded.graph.get_critical_path()

    if format == "json":
        _emit_json("critical-path", True, [], 0, critical_path=critical_path_to_dict(cp))

    _print_errors(list(loaded.lint_errors))
    typer.echo("Critical path: " + (" -> ".join(cp.path) or "(empty)"))
    typer.echo(f"Total duration: {cp.total_duration}")


@app.command("groups")
def groups(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    workers: Optional[int] = typer.Option(
        None, "--workers", help="Split levels into batches of at most this many tasks"
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
) -> None:
    """Print parallel execution groups, optionally bounded by a worker count."""
    loaded = _load("groups", path, config, format)
    if workers is None:
        plan = loaded.graph.get_parallel_groups()
    else:
        plan = loaded.graph.get_optimized_groups(workers)

    if format == "json":
        _emit_json(
            "groups", True, [], 0, workers=workers, groups=[group_to_dict(g) for g in plan]
        )

    _print_errors(list(loaded.lint_errors))
    title = "Parallel groups" if workers is None else f"Parallel groups (workers={workers})"
    table = Table(title=title)
    table.add_column("Level")
    table.add_column("Batch")
    table.add_column("Tasks")
    table.add_column("Concurrency")
    table.add_column("Duration")
    for g in plan:
        table.add_row(
            str(g.level),
            str(g.sub_index),
            ", ".join(t.id for t in g.tasks),
            str(g.max_concurrency),
            str(g.estimated_duration),
        )
    Console().print(table)


@app.command("analyze")
def analyze(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
    strict: bool = typer.Option(False, "--strict", help="Fail when diagnostics exist"),
) -> None:
    """Full analysis: critical path, parallel groups, bottlenecks, isolated tasks."""
    loaded = _load("analyze", path, config, format, strict=strict)
    analysis = loaded.graph.analyze()

    if format == "json":
        _emit_json(
            "analyze",
            True,
            [],
            0,
            analysis=analysis_to_dict(analysis),
            diagnostics=build_result_to_dict(loaded.result),
        )

    _print_errors(list(loaded.lint_errors))
    cp = analysis.critical_path
    typer.echo(
        f"Tasks: {analysis.total_nodes}, Edges: {analysis.total_edges}, "
        f"Max depth: {analysis.max_depth}"
    )
    typer.echo(f"Critical path: {' -> '.join(cp.path) or '(empty)'} (duration={cp.total_duration})")
    typer.echo(f"Parallel groups: {len(analysis.parallel_groups)}")
    for g in analysis.parallel_groups:
        ids = ", ".join(t.id for t in g.tasks)
        typer.echo(f"- level {g.level}: {ids} (duration={g.estimated_duration})")
    typer.echo("Bottlenecks: " + (", ".join(analysis.bottlenecks) or "none"))
    typer.echo("Isolated tasks: " + (", ".join(analysis.isolated_tasks) or "none"))


@app.command("ready")
def ready(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    completed: Optional[list[str]] = typer.Option(
        None, "--completed", "-c", help="Completed task id (repeatable)"
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
) -> None:
    """List tasks whose dependencies are all completed."""
    loaded = _load("ready", path, config, format)
    done = set(completed or [])
    tasks = loaded.graph.get_ready_tasks(done)

    if format == "json":
        _emit_json("ready", True, [], 0, completed=sorted(done), ready=[t.id for t in tasks])

    _print_errors(list(loaded.lint_errors))
    if not tasks:
        typer.echo("No ready tasks")
        return
    for t in tasks:
        typer.echo(f"- {t.id}: {t.description} (priority={t.priority})")


@app.command("dot")
def dot(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    out: Optional[str] = typer.Option(None, "--out", help="Write DOT output to this file"),
    config: Optional[str] = typer.Option(None, "--config", help="Optional scheduler config YAML"),
) -> None:
    """Export the graph in Graphviz DOT format (critical path in red)."""
    loaded = _load("dot", path, config, "text")
    text = loaded.graph.to_dot()
    _print_errors(list(loaded.lint_errors))

    if out is None:
        typer.echo(text)
        return

    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"OK: wrote {out}")


def _print_errors(errors: list[SchedulerError]) -> None:
    for e in sort_errors(errors):
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name=TOOL_NAME)


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()

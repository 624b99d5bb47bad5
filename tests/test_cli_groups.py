import json
from pathlib import Path

from typer.testing import CliRunner

from task_scheduler.cli import app

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"

runner = CliRunner()


def test_cli_groups_json_by_level():
    r = runner.invoke(app, ["groups", str(EXAMPLES / "basic-tasks.yaml"), "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["workers"] is None
    assert [g["tasks"] for g in payload["groups"]] == [
        ["T1"],
        ["T2", "T3", "T4"],
        ["T5", "T6"],
        ["T7"],
    ]


def test_cli_groups_json_with_workers():
    r = runner.invoke(
        app,
        ["groups", str(EXAMPLES / "basic-tasks.yaml"), "--workers", "2", "--format", "json"],
    )
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["workers"] == 2
    assert [(g["level"], g["sub_index"], g["tasks"]) for g in payload["groups"]] == [
        (0, 0, ["T1"]),
        (1, 0, ["T2", "T3"]),
        (1, 1, ["T4"]),
        (2, 0, ["T5", "T6"]),
        (3, 0, ["T7"]),
    ]


def test_cli_groups_table():
    r = runner.invoke(app, ["groups", str(EXAMPLES / "basic-tasks.yaml"), "--workers", "2"])
    assert r.exit_code == 0
    assert "Concurrency" in r.stdout
    assert "T2, T3" in r.stdout
    assert "T5, T6" in r.stdout

from pathlib import Path

from typer.testing import CliRunner

from task_scheduler.cli import app

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"

runner = CliRunner()


def test_cli_validate_success():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "basic-tasks.yaml")])
    assert r.exit_code == 0
    assert "OK: 7 tasks (low=3, medium=3, high=1)" in r.stdout
    assert "Graph: 7 nodes, 9 edges" in r.stdout


def test_cli_validate_json_list_file():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "decomposed-tasks.json")])
    assert r.exit_code == 0
    assert "OK: 3 tasks" in r.stdout


def test_cli_validate_unknown_dependency():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "invalid-unknown-dep.yaml")])
    assert r.exit_code == 2
    assert "L_UNKNOWN_DEPENDENCY" in (r.stdout + r.stderr)


def test_cli_validate_cycle():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "invalid-cycle.yaml")])
    assert r.exit_code == 2
    assert "L_CYCLE_REJECTED" in (r.stdout + r.stderr)


def test_cli_validate_missing_field():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "invalid-missing-field.yaml")])
    assert r.exit_code == 2
    assert "E_REQUIRED_FIELD" in (r.stdout + r.stderr)


def test_cli_validate_duplicate_id():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "invalid-duplicate-id.yaml")])
    assert r.exit_code == 2
    assert "E_DUPLICATE_ID" in (r.stdout + r.stderr)


def test_cli_validate_missing_file():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "nope.yaml")])
    assert r.exit_code == 1
    assert "E_FILE_NOT_FOUND" in (r.stdout + r.stderr)


def test_cli_unknown_format():
    r = runner.invoke(app, ["validate", str(EXAMPLES / "basic-tasks.yaml"), "--format", "xml"])
    assert r.exit_code == 2
    assert "E_UNKNOWN_FORMAT" in (r.stdout + r.stderr)


def test_cli_config_missing(tmp_path):
    r = runner.invoke(
        app,
        ["validate", str(EXAMPLES / "basic-tasks.yaml"), "--config", str(tmp_path / "no.yaml")],
    )
    assert r.exit_code == 1
    assert "E_CONFIG_FILE_NOT_FOUND" in (r.stdout + r.stderr)


def test_cli_config_invalid(tmp_path):
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("unknown_key: 1\n", encoding="utf-8")
    r = runner.invoke(app, ["validate", str(EXAMPLES / "basic-tasks.yaml"), "--config", str(cfg)])
    assert r.exit_code == 2
    assert "E_CONFIG_FILE_INVALID" in (r.stdout + r.stderr)

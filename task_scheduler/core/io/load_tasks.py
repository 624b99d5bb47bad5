"""Task file loading.

Two document shapes are accepted and come out identical:

- hand-written task files: a mapping with ``tasks`` (and optionally
  ``schema_version``), snake_case keys;
- decomposer output: either a bare list of tasks or a decompose result
  mapping (``objective``, ``reasoning``, ``tasks``, ``metadata``), with
  camelCase keys such as ``estimatedComplexity``.

Values are never coerced here; the validator owns shape checking.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable

import yaml

from task_scheduler.core.errors import TaskLoadError

_PARSERS: dict[str, tuple[str, Callable[[str], Any]]] = {
    ".yaml": ("E_YAML_PARSE", yaml.safe_load),
    ".yml": ("E_YAML_PARSE", yaml.safe_load),
    ".json": ("E_JSON_PARSE", json.loads),
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case_key(key: Any) -> Any:
    if not isinstance(key, str):
        return key
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def normalize_task_keys(raw: Any) -> Any:
    """snake_case the keys of one task mapping; explicit snake_case keys win."""
    if not isinstance(raw, dict):
        return raw
    out = {k: v for k, v in raw.items() if snake_case_key(k) == k}
    for k, v in raw.items():
        out.setdefault(snake_case_key(k), v)
    return out


def load_tasks(path: str) -> dict[str, Any]:
    """Load a YAML/JSON task file.

    Returns a dict with keys: schema_version, objective, tasks, __file__.
    ``tasks`` is whatever the file holds under that key, with each task
    mapping's keys normalized to snake_case.
    """

    p = Path(path)
    if not p.exists():
        raise TaskLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    parser = _PARSERS.get(p.suffix.lower())
    if parser is None:
        raise TaskLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {', '.join(sorted(_PARSERS))}",
            file=str(p),
        )
    parse_code, parse = parser

    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TaskLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        data = parse(text)
    except (yaml.YAMLError, ValueError) as e:
        raise TaskLoadError(code=parse_code, message=str(e), file=str(p)) from e

    if isinstance(data, list):
        data = {"tasks": data}
    if not isinstance(data, dict):
        raise TaskLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object or a list of tasks",
            file=str(p),
        )

    tasks = data.get("tasks")
    if isinstance(tasks, list):
        tasks = [normalize_task_keys(t) for t in tasks]

    return {
        "schema_version": data.get("schema_version"),
        "objective": data.get("objective"),
        "tasks": tasks,
        "__file__": str(p),
    }

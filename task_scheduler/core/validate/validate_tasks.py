from __future__ import annotations

from collections import Counter
from typing import Any, Optional, cast

from task_scheduler.core.errors import TaskValidationError, sort_errors
from task_scheduler.core.model import (
    ALLOWED_CATEGORIES,
    ALLOWED_COMPLEXITIES,
    Complexity,
    Task,
    TaskCategory,
)


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _field_error(
    raw: dict[str, Any], file: Optional[str], tid: str
) -> Optional[TaskValidationError]:
    """First problem in the fields of a task entry whose id is already known."""

    def err(code: str, field: str, message: str) -> TaskValidationError:
        return TaskValidationError(code=code, message=message, file=file, task_id=tid, field=field)

    description = raw.get("description")
    if not isinstance(description, str) or not description.strip():
        return err(
            "E_REQUIRED_FIELD",
            "description",
            "description is required and must be a non-empty string",
        )
    if raw.get("category", "other") not in ALLOWED_CATEGORIES:
        return err(
            "E_INVALID_ENUM", "category", f"category must be one of {list(ALLOWED_CATEGORIES)}"
        )
    deps = raw.get("dependencies")
    if deps is not None and not _is_list_of_str(deps):
        return err("E_INVALID_TYPE", "dependencies", "dependencies must be an array of strings")
    if not _is_int(raw.get("priority", 1)):
        return err("E_INVALID_TYPE", "priority", "priority must be an integer")
    if raw.get("estimated_complexity", "medium") not in ALLOWED_COMPLEXITIES:
        return err(
            "E_INVALID_ENUM",
            "estimated_complexity",
            f"estimated_complexity must be one of {list(ALLOWED_COMPLEXITIES)}",
        )
    return None


def validate_tasks(doc: dict[str, Any]) -> tuple[Optional[list[Task]], list[TaskValidationError]]:
    """Validate the shape of a loaded task document and build Task records.

    Returns (tasks, errors); tasks is None when errors exist. Each entry
    reports at most its first problem. Entries without a usable id are
    located by list index, all others by task id.

    Unknown dependency ids and dependency cycles are not shape errors: the
    graph tolerates them and reports them as build diagnostics.
    """

    file = cast(Optional[str], doc.get("__file__"))
    raw_tasks = doc.get("tasks")
    if not isinstance(raw_tasks, list):
        return None, [
            TaskValidationError(
                code="E_REQUIRED_FIELD",
                message="tasks is required and must be an array",
                file=file,
                path="tasks",
            )
        ]

    tasks: list[Task] = []
    errors: list[TaskValidationError] = []
    seen_ids: set[str] = set()

    for i, raw in enumerate(raw_tasks):
        if not isinstance(raw, dict):
            errors.append(
                TaskValidationError(
                    code="E_INVALID_TYPE",
                    message="task must be an object",
                    file=file,
                    path=f"tasks[{i}]",
                )
            )
            continue

        tid = raw.get("id")
        if not isinstance(tid, str) or not tid.strip():
            errors.append(
                TaskValidationError(
                    code="E_REQUIRED_FIELD",
                    message="id is required and must be a non-empty string",
                    file=file,
                    path=f"tasks[{i}].id",
                )
            )
            continue
        if tid in seen_ids:
            # the id alone cannot tell the two entries apart
            errors.append(
                TaskValidationError(
                    code="E_DUPLICATE_ID",
                    message=f"duplicate task id: {tid}",
                    file=file,
                    path=f"tasks[{i}].id",
                )
            )
            continue
        seen_ids.add(tid)

        problem = _field_error(raw, file, tid)
        if problem is not None:
            errors.append(problem)
            continue

        tasks.append(
            Task(
                id=tid,
                description=raw["description"],
                category=cast(TaskCategory, raw.get("category", "other")),
                dependencies=tuple(raw.get("dependencies") or ()),
                priority=raw.get("priority", 1),
                estimated_complexity=cast(
                    Complexity, raw.get("estimated_complexity", "medium")
                ),
            )
        )

    if errors:
        return None, sort_errors(errors)
    return tasks, []


def summarize_tasks(tasks: list[Task]) -> str:
    counts = Counter(t.estimated_complexity for t in tasks)
    breakdown = ", ".join(f"{c}={counts.get(c, 0)}" for c in ALLOWED_COMPLEXITIES)
    return f"OK: {len(tasks)} tasks ({breakdown})"

from __future__ import annotations

from typing import Optional

from task_scheduler.core.errors import TaskValidationError, sort_errors
from task_scheduler.core.model import BuildResult


# Graph lint rules, derived from the build diagnostics:
# - L_DUPLICATE_ID: a later task reused an id; the first definition was kept
# - L_UNKNOWN_DEPENDENCY: dependency id does not name any task; the edge was dropped
# - L_CYCLE_REJECTED: dependency would close a cycle; the edge was dropped
# Duplicate entries inside one dependency list are tolerated and not reported.


def lint_build(result: BuildResult, file: Optional[str] = None) -> list[TaskValidationError]:
    """Turn a BuildResult into coded errors the CLI can print next to validation errors."""

    errors: list[TaskValidationError] = []

    for tid in result.duplicate_ids:
        errors.append(
            TaskValidationError(
                code="L_DUPLICATE_ID",
                message=f"duplicate task id: {tid} (later definition ignored)",
                file=file,
                task_id=tid,
            )
        )

    for dangling in result.dangling_dependencies:
        errors.append(
            TaskValidationError(
                code="L_UNKNOWN_DEPENDENCY",
                message=f"dependencies references unknown id: {dangling.dependency_id}",
                file=file,
                task_id=dangling.task_id,
                field="dependencies",
            )
        )

    for rejected in result.rejected_edges:
        if rejected.reason != "cycle":
            continue
        errors.append(
            TaskValidationError(
                code="L_CYCLE_REJECTED",
                message=f"dependency on {rejected.from_id} would create a cycle; edge dropped",
                file=file,
                task_id=rejected.to_id,
                field="dependencies",
            )
        )

    return sort_errors(errors)

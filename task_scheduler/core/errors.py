from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar


@dataclass(frozen=True)
class SchedulerError(Exception):
    """Coded diagnostic about a task file.

    Errors about one task carry its ``task_id`` and the offending ``field``;
    ``pointer`` renders them as ``tasks.<id>.<field>``. Errors that cannot be
    pinned to a task id (missing or repeated ids, config keys, CLI options)
    set ``path`` instead.
    """

    code: str
    message: str
    file: Optional[str] = None
    task_id: Optional[str] = None
    field: Optional[str] = None
    path: Optional[str] = None

    @property
    def pointer(self) -> Optional[str]:
        if self.task_id is None:
            return self.path
        return ".".join(p for p in ("tasks", self.task_id, self.field) if p)

    def sort_key(self) -> tuple[str, str, str]:
        return (self.file or "", self.pointer or "", self.code)

    def __str__(self) -> str:
        where = ":".join(p for p in (self.file, self.pointer) if p) or "<tasks>"
        return f"{where}: {self.code}: {self.message}"


class TaskLoadError(SchedulerError):
    """The file could not be read or parsed; nothing was validated."""


class TaskValidationError(SchedulerError):
    """A rejected task entry or a graph diagnostic from a parsed file."""


E = TypeVar("E", bound="SchedulerError")


def sort_errors(errors: Iterable[E]) -> list[E]:
    return sorted(errors, key=SchedulerError.sort_key)

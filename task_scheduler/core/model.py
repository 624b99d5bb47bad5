from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional


Complexity = Literal["low", "medium", "high"]
TaskCategory = Literal["design", "implement", "test", "document", "other"]

ALLOWED_COMPLEXITIES: tuple[str, ...] = ("low", "medium", "high")
ALLOWED_CATEGORIES: tuple[str, ...] = ("design", "implement", "test", "document", "other")

# Duration units per complexity; every timing computation goes through duration_for().
COMPLEXITY_DURATION: dict[str, int] = {
    "low": 1,
    "medium": 2,
    "high": 4,
}


def duration_for(complexity: str, durations: Optional[Mapping[str, int]] = None) -> int:
    table = durations if durations is not None else COMPLEXITY_DURATION
    return table.get(complexity, COMPLEXITY_DURATION["medium"])


@dataclass(frozen=True)
class Task:
    id: str
    description: str
    category: TaskCategory = "other"
    dependencies: tuple[str, ...] = ()
    priority: int = 1
    estimated_complexity: Complexity = "medium"


@dataclass
class GraphNode:
    """Per-task state derived by the graph. Degrees and id sets count accepted edges only."""

    id: str
    task: Task
    in_degree: int = 0
    out_degree: int = 0
    dependencies: set[str] = field(default_factory=set)
    dependents: set[str] = field(default_factory=set)
    earliest_start: int = 0
    latest_start: int = 0
    slack: int = 0
    level: int = 0


@dataclass(frozen=True)
class GraphEdge:
    from_id: str
    to_id: str
    weight: int  # duration of from_id


@dataclass(frozen=True)
class CriticalPathInfo:
    path: list[str]
    total_duration: int
    tasks: list[Task]


@dataclass(frozen=True)
class ParallelGroup:
    level: int
    sub_index: int
    tasks: list[Task]
    max_concurrency: int
    estimated_duration: int


@dataclass(frozen=True)
class GraphAnalysis:
    total_nodes: int
    total_edges: int
    max_depth: int
    critical_path: CriticalPathInfo
    parallel_groups: list[ParallelGroup]
    bottlenecks: list[str]
    isolated_tasks: list[str]


RejectionReason = Literal["cycle", "duplicate_edge", "unknown_endpoint"]


@dataclass(frozen=True)
class RejectedEdge:
    from_id: str
    to_id: str
    reason: RejectionReason


@dataclass(frozen=True)
class DanglingDependency:
    task_id: str
    dependency_id: str


@dataclass(frozen=True)
class BuildResult:
    node_count: int
    accepted_edges: list[GraphEdge]
    rejected_edges: list[RejectedEdge]
    dangling_dependencies: list[DanglingDependency]
    duplicate_ids: list[str]

    @property
    def has_cycles(self) -> bool:
        return any(r.reason == "cycle" for r in self.rejected_edges)

    @property
    def ok(self) -> bool:
        return not (self.has_cycles or self.dangling_dependencies or self.duplicate_ids)

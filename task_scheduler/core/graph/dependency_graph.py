from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from task_scheduler.core.config.scheduler_config import SchedulerConfig
from task_scheduler.core.graph.analysis import analyze_graph
from task_scheduler.core.graph.export import render_dot, render_text
from task_scheduler.core.graph.grouping import optimized_groups, parallel_groups
from task_scheduler.core.graph.levels import assign_levels
from task_scheduler.core.graph.ordering import extract_critical_path, topological_order
from task_scheduler.core.graph.timing import (
    compute_earliest_starts,
    compute_latest_starts,
    compute_slack,
    node_duration,
)
from task_scheduler.core.model import (
    BuildResult,
    CriticalPathInfo,
    DanglingDependency,
    GraphAnalysis,
    GraphEdge,
    GraphNode,
    ParallelGroup,
    RejectedEdge,
    Task,
)

logger = logging.getLogger(__name__)


class DependencyGraph:
    """DAG of tasks with CPM timing and parallel batch planning.

    The graph is rebuilt from scratch by ``build_from_tasks``. Structural
    problems in the input (unknown dependency ids, edges that would close a
    cycle, duplicate task ids) never raise: the offending part is dropped and
    reported in the returned ``BuildResult``.

    Not thread-safe; one owner at a time.
    """

    def __init__(self, config: Optional[SchedulerConfig] = None) -> None:
        self.config = config or SchedulerConfig()
        self._nodes: dict[str, GraphNode] = {}
        self._edges: list[GraphEdge] = []
        self._forward: dict[str, list[str]] = {}
        self._reverse: dict[str, list[str]] = {}
        self._rejected: list[RejectedEdge] = []
        self._order: list[str] = []

    # ---- building ----

    def build_from_tasks(self, tasks: Iterable[Task]) -> BuildResult:
        self.clear()
        tasks = list(tasks)

        duplicate_ids: list[str] = []
        accepted: list[Task] = []
        for task in tasks:
            if task.id in self._nodes:
                duplicate_ids.append(task.id)
                logger.warning("duplicate task id %s ignored; first definition kept", task.id)
                continue
            self._add_node(task)
            accepted.append(task)

        dangling: list[DanglingDependency] = []
        for task in accepted:
            for dep_id in task.dependencies:
                if dep_id not in self._nodes:
                    dangling.append(DanglingDependency(task_id=task.id, dependency_id=dep_id))
                    logger.warning("task %s depends on unknown id %s", task.id, dep_id)
                    continue
                self.add_edge(dep_id, task.id)

        self.recompute()

        result = BuildResult(
            node_count=len(self._nodes),
            accepted_edges=list(self._edges),
            rejected_edges=list(self._rejected),
            dangling_dependencies=dangling,
            duplicate_ids=duplicate_ids,
        )
        logger.info("graph built: %d nodes, %d edges", len(self._nodes), len(self._edges))
        return result

    def _add_node(self, task: Task) -> None:
        self._nodes[task.id] = GraphNode(id=task.id, task=task)
        self._forward[task.id] = []
        self._reverse[task.id] = []

    def add_edge(self, from_id: str, to_id: str) -> bool:
        """Add ``from_id -> to_id`` (to_id depends on from_id).

        Returns False, leaving the edge set untouched, when an endpoint is
        unknown, the edge already exists, or the edge would close a cycle.
        Each refusal is kept in ``rejected_edges``. Levels and timings are
        stale until ``recompute()``.
        """
        from_node = self._nodes.get(from_id)
        to_node = self._nodes.get(to_id)
        if from_node is None or to_node is None:
            self._rejected.append(
                RejectedEdge(from_id=from_id, to_id=to_id, reason="unknown_endpoint")
            )
            missing = from_id if from_node is None else to_id
            logger.warning("dependency %s -> %s rejected: unknown id %s", from_id, to_id, missing)
            return False

        if to_id in from_node.dependents:
            self._rejected.append(
                RejectedEdge(from_id=from_id, to_id=to_id, reason="duplicate_edge")
            )
            logger.debug("duplicate dependency %s -> %s ignored", from_id, to_id)
            return False

        if self._would_create_cycle(from_id, to_id):
            self._rejected.append(RejectedEdge(from_id=from_id, to_id=to_id, reason="cycle"))
            logger.warning("dependency %s -> %s rejected: would create a cycle", from_id, to_id)
            return False

        self._edges.append(
            GraphEdge(from_id=from_id, to_id=to_id, weight=node_duration(from_node, self.durations))
        )
        self._forward[from_id].append(to_id)
        self._reverse[to_id].append(from_id)
        from_node.out_degree += 1
        from_node.dependents.add(to_id)
        to_node.in_degree += 1
        to_node.dependencies.add(from_id)
        return True

    def _would_create_cycle(self, from_id: str, to_id: str) -> bool:
        # Cycle iff from_id is reachable from to_id over accepted edges.
        visited: set[str] = set()
        stack = [to_id]
        while stack:
            current = stack.pop()
            if current == from_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self._forward.get(current, []))
        return False

    def recompute(self) -> None:
        """Recompute levels, schedule order and CPM timings from the current edges."""
        for node in self._nodes.values():
            node.level = 0
            node.earliest_start = 0
            node.latest_start = 0
            node.slack = 0

        assign_levels(self._nodes, self._forward)
        self._order = topological_order(self._nodes, self._forward)
        compute_earliest_starts(self._nodes, self._reverse, self._order, self.durations)
        compute_latest_starts(self._nodes, self._forward, self._order, self.durations)
        compute_slack(self._nodes)

    def clear(self) -> None:
        self._nodes = {}
        self._edges = []
        self._forward = {}
        self._reverse = {}
        self._rejected = []
        self._order = []

    # ---- views ----

    @property
    def durations(self) -> Mapping[str, int]:
        return self.config.durations

    @property
    def nodes(self) -> Mapping[str, GraphNode]:
        return dict(self._nodes)

    @property
    def edges(self) -> list[GraphEdge]:
        return list(self._edges)

    @property
    def rejected_edges(self) -> list[RejectedEdge]:
        return list(self._rejected)

    @property
    def forward(self) -> Mapping[str, list[str]]:
        return self._forward

    @property
    def reverse(self) -> Mapping[str, list[str]]:
        return self._reverse

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def __str__(self) -> str:
        return self.to_string()

    def get_node(self, task_id: str) -> Optional[GraphNode]:
        return self._nodes.get(task_id)

    def duration_of(self, task_id: str) -> int:
        return node_duration(self._nodes[task_id], self.durations)

    # ---- scheduling ----

    def topological_sort(self) -> list[str]:
        return list(self._order)

    def get_sorted_tasks(self) -> list[Task]:
        return [self._nodes[nid].task for nid in self._order]

    def get_critical_path(self) -> CriticalPathInfo:
        return extract_critical_path(self._nodes, self._forward, self._order, self.durations)

    def get_parallel_groups(self) -> list[ParallelGroup]:
        return parallel_groups(self._nodes, self.durations)

    def get_optimized_groups(self, max_workers: Optional[int] = None) -> list[ParallelGroup]:
        workers = self.config.default_workers if max_workers is None else max_workers
        return optimized_groups(self._nodes, self.durations, workers)

    def analyze(self) -> GraphAnalysis:
        return analyze_graph(self)

    # ---- queries ----

    def are_dependencies_satisfied(self, task_id: str, completed: Iterable[str]) -> bool:
        node = self._nodes.get(task_id)
        if node is None:
            return False
        done = set(completed)
        return all(dep in done for dep in node.dependencies)

    def get_ready_tasks(self, completed: Iterable[str]) -> list[Task]:
        done = set(completed)
        ready = [
            node.task
            for nid, node in self._nodes.items()
            if nid not in done and all(dep in done for dep in node.dependencies)
        ]
        return sorted(ready, key=lambda t: t.priority)

    def get_descendants(self, task_id: str) -> list[str]:
        return _reachable(task_id, self._forward)

    def get_ancestors(self, task_id: str) -> list[str]:
        return _reachable(task_id, self._reverse)

    # ---- export ----

    def to_string(self) -> str:
        return render_text(self)

    def to_dot(self) -> str:
        return render_dot(self)


def _reachable(start: str, adjacency: Mapping[str, list[str]]) -> list[str]:
    found: list[str] = []
    visited: set[str] = set()
    stack = [start]
    while stack:
        current = stack.pop()
        for nxt in adjacency.get(current, []):
            if nxt not in visited:
                visited.add(nxt)
                found.append(nxt)
                stack.append(nxt)
    return found


def build_dependency_graph(
    tasks: Iterable[Task], config: Optional[SchedulerConfig] = None
) -> tuple[DependencyGraph, BuildResult]:
    graph = DependencyGraph(config)
    result = graph.build_from_tasks(tasks)
    return graph, result

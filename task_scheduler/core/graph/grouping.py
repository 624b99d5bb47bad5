from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Mapping

from task_scheduler.core.model import GraphNode, ParallelGroup, Task, duration_for

logger = logging.getLogger(__name__)


def parallel_groups(
    nodes: Mapping[str, GraphNode], durations: Mapping[str, int]
) -> list[ParallelGroup]:
    """One group per level; members of a level share no dependency path."""
    by_level: dict[int, list[Task]] = defaultdict(list)
    for node in nodes.values():
        by_level[node.level].append(node.task)

    groups: list[ParallelGroup] = []
    for level in sorted(by_level):
        tasks = by_level[level]
        groups.append(
            ParallelGroup(
                level=level,
                sub_index=0,
                tasks=tasks,
                max_concurrency=len(tasks),
                estimated_duration=_max_duration(tasks, durations),
            )
        )
    return groups


def optimized_groups(
    nodes: Mapping[str, GraphNode], durations: Mapping[str, int], max_workers: int
) -> list[ParallelGroup]:
    """Level groups split into batches of at most ``max_workers`` tasks.

    A level with n > max_workers tasks becomes ceil(n / max_workers) batches
    ordered by (level, sub_index).
    """
    if max_workers < 1:
        logger.warning("max_workers=%d is below 1; using 1", max_workers)
        max_workers = 1

    out: list[ParallelGroup] = []
    for group in parallel_groups(nodes, durations):
        if len(group.tasks) <= max_workers:
            out.append(group)
            continue

        batches = split_into_batches(group.tasks, max_workers, durations)
        logger.debug(
            "level %d: %d tasks split into %d batches", group.level, len(group.tasks), len(batches)
        )
        for i, batch in enumerate(batches):
            out.append(
                ParallelGroup(
                    level=group.level,
                    sub_index=i,
                    tasks=batch,
                    max_concurrency=len(batch),
                    estimated_duration=_max_duration(batch, durations),
                )
            )
    return out


def split_into_batches(
    tasks: list[Task], batch_size: int, durations: Mapping[str, int]
) -> list[list[Task]]:
    # priority ascending, then duration descending
    ordered = sorted(
        tasks,
        key=lambda t: (t.priority, -duration_for(t.estimated_complexity, durations)),
    )
    count = math.ceil(len(ordered) / batch_size)
    return [ordered[i * batch_size : (i + 1) * batch_size] for i in range(count)]


def _max_duration(tasks: list[Task], durations: Mapping[str, int]) -> int:
    return max((duration_for(t.estimated_complexity, durations) for t in tasks), default=0)

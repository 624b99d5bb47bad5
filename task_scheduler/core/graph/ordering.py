from __future__ import annotations

import heapq
import itertools
from typing import Mapping

from task_scheduler.core.graph.timing import node_duration
from task_scheduler.core.model import CriticalPathInfo, GraphNode


def topological_order(
    nodes: Mapping[str, GraphNode], forward: Mapping[str, list[str]]
) -> list[str]:
    """Kahn's algorithm; among ready nodes the lowest priority value goes first.

    Equal priorities keep the order in which the nodes became ready.
    """
    in_degrees = {nid: node.in_degree for nid, node in nodes.items()}
    seq = itertools.count()
    ready: list[tuple[int, int, str]] = []

    for nid, node in nodes.items():
        if node.in_degree == 0:
            heapq.heappush(ready, (node.task.priority, next(seq), nid))

    order: list[str] = []
    while ready:
        _, _, current = heapq.heappop(ready)
        order.append(current)
        for nxt in forward.get(current, []):
            in_degrees[nxt] -= 1
            if in_degrees[nxt] == 0:
                heapq.heappush(ready, (nodes[nxt].task.priority, next(seq), nxt))

    return order


def extract_critical_path(
    nodes: Mapping[str, GraphNode],
    forward: Mapping[str, list[str]],
    order: list[str],
    durations: Mapping[str, int],
) -> CriticalPathInfo:
    """Walk one contiguous chain of zero-slack nodes from a source to the horizon.

    Parallel zero-slack branches of equal length are not merged into the path;
    ties are broken by priority, then by schedule order.
    """
    rank = {nid: i for i, nid in enumerate(order)}

    def _key(nid: str) -> tuple[int, int]:
        return (nodes[nid].task.priority, rank.get(nid, len(rank)))

    sources = [nid for nid, n in nodes.items() if n.in_degree == 0 and n.slack == 0]
    if not sources:
        return CriticalPathInfo(path=[], total_duration=0, tasks=[])

    current = min(sources, key=_key)
    path = [current]
    while True:
        node = nodes[current]
        finish = node.earliest_start + node_duration(node, durations)
        candidates = [
            d
            for d in forward.get(current, [])
            if nodes[d].slack == 0 and nodes[d].earliest_start == finish
        ]
        if not candidates:
            break
        current = min(candidates, key=_key)
        path.append(current)

    return CriticalPathInfo(
        path=path,
        total_duration=sum(node_duration(nodes[nid], durations) for nid in path),
        tasks=[nodes[nid].task for nid in path],
    )

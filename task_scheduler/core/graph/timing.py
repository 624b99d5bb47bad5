"""Critical Path Method passes over the accepted-edge graph.

All values are integer duration units. The passes mutate the GraphNode
timing fields in place and expect ``order`` to be a topological order.
"""

from __future__ import annotations

from typing import Mapping

from task_scheduler.core.model import GraphNode, duration_for


def node_duration(node: GraphNode, durations: Mapping[str, int]) -> int:
    return duration_for(node.task.estimated_complexity, durations)


def project_horizon(nodes: Mapping[str, GraphNode], durations: Mapping[str, int]) -> int:
    """Earliest finish of the whole task set."""
    return max((n.earliest_start + node_duration(n, durations) for n in nodes.values()), default=0)


def compute_earliest_starts(
    nodes: Mapping[str, GraphNode],
    reverse: Mapping[str, list[str]],
    order: list[str],
    durations: Mapping[str, int],
) -> None:
    for nid in order:
        node = nodes[nid]
        node.earliest_start = max(
            (
                nodes[dep].earliest_start + node_duration(nodes[dep], durations)
                for dep in reverse.get(nid, [])
            ),
            default=0,
        )


def compute_latest_starts(
    nodes: Mapping[str, GraphNode],
    forward: Mapping[str, list[str]],
    order: list[str],
    durations: Mapping[str, int],
) -> None:
    horizon = project_horizon(nodes, durations)

    for nid in reversed(order):
        node = nodes[nid]
        dependents = forward.get(nid, [])
        latest_finish = (
            min(nodes[d].latest_start for d in dependents) if dependents else horizon
        )
        node.latest_start = latest_finish - node_duration(node, durations)


def compute_slack(nodes: Mapping[str, GraphNode]) -> None:
    for node in nodes.values():
        node.slack = node.latest_start - node.earliest_start

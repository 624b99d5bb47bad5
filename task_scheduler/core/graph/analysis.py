from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from task_scheduler.core.model import GraphAnalysis, GraphNode

if TYPE_CHECKING:
    from task_scheduler.core.graph.dependency_graph import DependencyGraph

logger = logging.getLogger(__name__)


def find_bottlenecks(nodes: Mapping[str, GraphNode], threshold: int = 3) -> list[str]:
    """Nodes with fan-out or fan-in of at least ``threshold`` accepted edges."""
    return [
        nid
        for nid, node in nodes.items()
        if len(node.dependents) >= threshold or len(node.dependencies) >= threshold
    ]


def find_isolated_tasks(nodes: Mapping[str, GraphNode]) -> list[str]:
    if len(nodes) <= 1:
        return []
    return [nid for nid, node in nodes.items() if node.in_degree == 0 and node.out_degree == 0]


def analyze_graph(graph: DependencyGraph) -> GraphAnalysis:
    nodes = graph.nodes
    analysis = GraphAnalysis(
        total_nodes=len(nodes),
        total_edges=len(graph.edges),
        max_depth=max((n.level for n in nodes.values()), default=0),
        critical_path=graph.get_critical_path(),
        parallel_groups=graph.get_parallel_groups(),
        bottlenecks=find_bottlenecks(nodes, graph.config.bottleneck_threshold),
        isolated_tasks=find_isolated_tasks(nodes),
    )
    logger.debug(
        "analysis completed: %d nodes, depth %d, %d bottlenecks, %d isolated",
        analysis.total_nodes,
        analysis.max_depth,
        len(analysis.bottlenecks),
        len(analysis.isolated_tasks),
    )
    return analysis

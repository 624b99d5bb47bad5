from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from task_scheduler.core.model import (
    BuildResult,
    CriticalPathInfo,
    GraphAnalysis,
    ParallelGroup,
    Task,
)

if TYPE_CHECKING:
    from task_scheduler.core.graph.dependency_graph import DependencyGraph


DOT_LABEL_WIDTH = 20


def render_text(graph: DependencyGraph) -> str:
    lines = ["Dependency Graph:", ""]
    for nid in graph.topological_sort():
        node = graph.get_node(nid)
        assert node is not None
        deps = ", ".join(graph.reverse.get(nid, [])) or "none"
        dependents = ", ".join(graph.forward.get(nid, [])) or "none"
        lines.append(f"[{nid}] {node.task.description}")
        lines.append(f"  Level: {node.level}, Priority: {node.task.priority}")
        lines.append(f"  Dependencies: {deps}")
        lines.append(f"  Dependents: {dependents}")
        lines.append(f"  ES: {node.earliest_start}, LS: {node.latest_start}, Slack: {node.slack}")
        lines.append("")
    return "\n".join(lines)


def render_dot(graph: DependencyGraph) -> str:
    """Graphviz digraph.

    Nodes on the reported critical path are red; other zero-slack nodes
    (parallel chains of the same length) are orange.
    """
    critical = set(graph.get_critical_path().path)
    lines = ["digraph G {", "  rankdir=TB;"]

    for nid, node in graph.nodes.items():
        desc = node.task.description
        if len(desc) > DOT_LABEL_WIDTH:
            desc = desc[:DOT_LABEL_WIDTH] + "..."
        if nid in critical:
            color = "red"
        elif node.slack == 0:
            color = "orange"
        else:
            color = "black"
        label = f"{_dot_escape(nid)}\\n{_dot_escape(desc)}"
        lines.append(f'  "{_dot_escape(nid)}" [label="{label}" color="{color}"];')

    for edge in graph.edges:
        lines.append(f'  "{_dot_escape(edge.from_id)}" -> "{_dot_escape(edge.to_id)}";')

    lines.append("}")
    return "\n".join(lines)


def _dot_escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


# JSON-ready conversions used by the CLI.


def task_to_dict(task: Task) -> dict[str, Any]:
    d = asdict(task)
    d["dependencies"] = list(task.dependencies)
    return d


def critical_path_to_dict(cp: CriticalPathInfo) -> dict[str, Any]:
    return {"path": list(cp.path), "total_duration": cp.total_duration}


def group_to_dict(group: ParallelGroup) -> dict[str, Any]:
    return {
        "level": group.level,
        "sub_index": group.sub_index,
        "tasks": [t.id for t in group.tasks],
        "max_concurrency": group.max_concurrency,
        "estimated_duration": group.estimated_duration,
    }


def analysis_to_dict(analysis: GraphAnalysis) -> dict[str, Any]:
    return {
        "total_nodes": analysis.total_nodes,
        "total_edges": analysis.total_edges,
        "max_depth": analysis.max_depth,
        "critical_path": critical_path_to_dict(analysis.critical_path),
        "parallel_groups": [group_to_dict(g) for g in analysis.parallel_groups],
        "bottlenecks": list(analysis.bottlenecks),
        "isolated_tasks": list(analysis.isolated_tasks),
    }


def build_result_to_dict(result: BuildResult) -> dict[str, Any]:
    return {
        "ok": result.ok,
        "node_count": result.node_count,
        "edge_count": len(result.accepted_edges),
        "rejected_edges": [asdict(r) for r in result.rejected_edges],
        "dangling_dependencies": [asdict(d) for d in result.dangling_dependencies],
        "duplicate_ids": list(result.duplicate_ids),
    }

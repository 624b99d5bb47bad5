import logging

from task_scheduler.core.graph import DependencyGraph, build_dependency_graph
from task_scheduler.core.model import DanglingDependency, RejectedEdge, Task


def _t(tid, deps=(), priority=1, complexity="medium"):
    return Task(
        id=tid,
        description=f"task {tid}",
        dependencies=tuple(deps),
        priority=priority,
        estimated_complexity=complexity,
    )


def test_build_counts_degrees_and_edges():
    graph, result = build_dependency_graph([_t("A"), _t("B", ["A"]), _t("C", ["A", "B"])])
    assert result.ok
    assert result.node_count == 3
    assert [(e.from_id, e.to_id) for e in result.accepted_edges] == [
        ("A", "B"),
        ("A", "C"),
        ("B", "C"),
    ]
    a = graph.get_node("A")
    c = graph.get_node("C")
    assert a is not None and c is not None
    assert a.out_degree == 2 and a.in_degree == 0
    assert c.in_degree == 2
    assert c.dependencies == {"A", "B"}
    assert a.dependents == {"B", "C"}


def test_edge_weight_is_duration_of_source():
    graph, result = build_dependency_graph([_t("A", complexity="high"), _t("B", ["A"])])
    assert result.accepted_edges[0].weight == 4


def test_reverse_edge_is_rejected_and_state_unchanged():
    graph = DependencyGraph()
    graph.build_from_tasks([_t("A"), _t("B")])

    assert graph.add_edge("A", "B") is True
    assert graph.add_edge("B", "A") is False

    a = graph.get_node("A")
    b = graph.get_node("B")
    assert a is not None and b is not None
    assert a.out_degree == 1
    assert b.out_degree == 0
    assert b.dependents == set()
    assert len(graph.edges) == 1


def test_add_edge_unknown_endpoint(caplog):
    graph = DependencyGraph()
    graph.build_from_tasks([_t("A")])
    with caplog.at_level(logging.WARNING, logger="task_scheduler"):
        assert graph.add_edge("A", "missing") is False
        assert graph.add_edge("missing", "A") is False
    assert graph.edges == []
    assert graph.rejected_edges == [
        RejectedEdge(from_id="A", to_id="missing", reason="unknown_endpoint"),
        RejectedEdge(from_id="missing", to_id="A", reason="unknown_endpoint"),
    ]
    messages = [r.getMessage() for r in caplog.records]
    assert sum("unknown id missing" in m for m in messages) == 2
    a = graph.get_node("A")
    assert a is not None
    assert a.out_degree == 0 and a.in_degree == 0


def test_cycle_in_input_drops_closing_edge():
    graph, result = build_dependency_graph([_t("T1", ["T3"]), _t("T2", ["T1"]), _t("T3", ["T2"])])
    assert result.has_cycles
    assert not result.ok
    assert result.rejected_edges == [RejectedEdge(from_id="T2", to_id="T3", reason="cycle")]
    assert graph.topological_sort() == ["T3", "T1", "T2"]


def test_self_dependency_is_a_cycle():
    graph, result = build_dependency_graph([_t("A", ["A"])])
    assert result.rejected_edges == [RejectedEdge(from_id="A", to_id="A", reason="cycle")]
    assert graph.topological_sort() == ["A"]


def test_dangling_dependency_is_reported_once_and_task_kept():
    graph, result = build_dependency_graph([_t("A"), _t("D", ["X"])])
    assert result.dangling_dependencies == [DanglingDependency(task_id="D", dependency_id="X")]
    d = graph.get_node("D")
    assert d is not None
    assert d.in_degree == 0
    assert "D" in graph.topological_sort()
    assert not result.ok


def test_duplicate_ids_keep_first_definition():
    graph, result = build_dependency_graph([_t("T1", priority=1), _t("T1", priority=5)])
    assert result.duplicate_ids == ["T1"]
    assert len(graph) == 1
    node = graph.get_node("T1")
    assert node is not None
    assert node.task.priority == 1


def test_repeated_dependency_entry_counts_once():
    graph, result = build_dependency_graph([_t("A"), _t("B", ["A", "A"])])
    assert len(result.accepted_edges) == 1
    assert result.rejected_edges == [RejectedEdge(from_id="A", to_id="B", reason="duplicate_edge")]
    assert not result.has_cycles
    assert result.ok
    b = graph.get_node("B")
    assert b is not None
    assert b.in_degree == 1
    assert graph.topological_sort() == ["A", "B"]


def test_rebuild_replaces_previous_graph():
    graph = DependencyGraph()
    graph.build_from_tasks([_t("A"), _t("B", ["A"])])
    graph.build_from_tasks([_t("X")])
    assert len(graph) == 1
    assert "A" not in graph
    assert "X" in graph
    assert graph.edges == []


def test_clear_empties_graph():
    graph, _ = build_dependency_graph([_t("A"), _t("B", ["A"])])
    graph.clear()
    assert len(graph) == 0
    assert graph.topological_sort() == []


def test_recompute_after_manual_edges():
    graph = DependencyGraph()
    graph.build_from_tasks([_t("A"), _t("B")])
    graph.add_edge("A", "B")
    graph.recompute()
    b = graph.get_node("B")
    assert b is not None
    assert b.level == 1
    assert b.earliest_start == 2


def test_nodes_view_is_a_copy():
    graph, _ = build_dependency_graph([_t("A")])
    view = graph.nodes
    assert isinstance(view, dict)
    view.pop("A")
    assert "A" in graph


def test_empty_input_is_an_empty_graph():
    graph, result = build_dependency_graph([])
    assert result.ok
    assert result.node_count == 0
    assert graph.topological_sort() == []

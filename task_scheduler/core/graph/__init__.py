"""Task dependency graph and scheduling engine.

Pure, synchronous computation over a declarative task list: DAG
construction with edge-time cycle rejection, Kahn levels, CPM timing,
critical path, and worker-bounded parallel batches. Nothing here executes
tasks or performs I/O.
"""

from task_scheduler.core.graph.dependency_graph import DependencyGraph, build_dependency_graph

__all__ = ["DependencyGraph", "build_dependency_graph"]

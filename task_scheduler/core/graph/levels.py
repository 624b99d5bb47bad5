from __future__ import annotations

import logging
from typing import Mapping

from task_scheduler.core.model import GraphNode

logger = logging.getLogger(__name__)


def assign_levels(nodes: dict[str, GraphNode], forward: Mapping[str, list[str]]) -> list[str]:
    """Kahn layering: level 0 holds nodes without dependencies, level k+1 the
    nodes whose last dependency was released at level k.

    Returns the ids that could not be layered. That only happens when the
    accepted edges contain a cycle; those nodes keep their current level.
    """
    in_degrees = {nid: node.in_degree for nid, node in nodes.items()}
    remaining = list(nodes.keys())
    level = 0

    while remaining:
        current = [nid for nid in remaining if in_degrees[nid] == 0]
        if not current:
            logger.warning("level assignment stopped with %d unresolved nodes", len(remaining))
            break

        for nid in current:
            nodes[nid].level = level
            for dependent in forward.get(nid, []):
                in_degrees[dependent] -= 1

        done = set(current)
        remaining = [nid for nid in remaining if nid not in done]
        level += 1

    return remaining

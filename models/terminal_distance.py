from __future__ import annotations

import math
from collections import deque
from typing import AbstractSet

from .site_graph import SiteGraph, SiteKey, squared_distance

UNREACHABLE = math.inf


def terminal_distance_score(
    start: SiteKey,
    visited: AbstractSet[SiteKey],
    graph: SiteGraph,
    *,
    max_expansions: int | None = None,
) -> float:
    """Score how far ``start`` is from the nearest unvisited terminal.

    The search is breadth-first (hop order), but the reported cost is the sum
    of squared edge lengths along the BFS tree path to the first unvisited
    terminal that gets popped. Returns ``UNREACHABLE`` when the component has
    no such terminal or ``max_expansions`` pops pass without finding one.
    ``visited`` is only read.
    """

    if graph.is_terminal(start):
        return 0.0

    queue: deque[tuple[SiteKey, float]] = deque([(start, 0.0)])
    seen: set[SiteKey] = {start}
    expansions = 0
    while queue:
        node, cost = queue.popleft()
        if node != start and node not in visited and graph.is_terminal(node):
            return cost
        expansions += 1
        if max_expansions and expansions > max_expansions:
            return UNREACHABLE
        for neighbor in graph.neighbors(node):
            if neighbor in seen:
                continue
            seen.add(neighbor)
            queue.append((neighbor, cost + squared_distance(graph, node, neighbor)))
    return UNREACHABLE


__all__ = ["UNREACHABLE", "terminal_distance_score"]

from __future__ import annotations

from collections import deque
from typing import AbstractSet

from .site_graph import SiteGraph, SiteKey, squared_distance


def find_bridge_path(
    start: SiteKey,
    targets: AbstractSet[SiteKey],
    graph: SiteGraph,
) -> list[SiteKey] | None:
    """Return the hop-shortest site path from ``start`` to any member of ``targets``.

    Neighbors are enqueued nearest-first (squared distance from the node being
    expanded, ties in discovery order), so among equal-hop candidates the
    spatially greedy one wins even if another is shorter overall. ``start``
    itself never counts as a match. Returns ``None`` when no target is
    reachable.
    """

    parents: dict[SiteKey, SiteKey] = {}
    seen: set[SiteKey] = {start}
    queue: deque[SiteKey] = deque([start])
    while queue:
        node = queue.popleft()
        if node != start and node in targets:
            return _reconstruct(parents, start, node)
        ordered = sorted(
            graph.neighbors(node),
            key=lambda neighbor: squared_distance(graph, node, neighbor),
        )
        for neighbor in ordered:
            if neighbor in seen:
                continue
            seen.add(neighbor)
            parents[neighbor] = node
            queue.append(neighbor)
    return None


def _reconstruct(parents: dict[SiteKey, SiteKey], start: SiteKey, goal: SiteKey) -> list[SiteKey]:
    path = [goal]
    current = goal
    while current != start:
        current = parents[current]
        path.append(current)
    path.reverse()
    return path


__all__ = ["find_bridge_path"]

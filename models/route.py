from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .bridge import find_bridge_path
from .site_graph import (
    DEFAULT_TOLERANCE,
    SiteGraph,
    SiteKey,
    build_site_graph,
    build_site_graph_from_loops,
    build_site_graph_from_segments,
)
from .terminal_distance import terminal_distance_score
from .toolpath import ToolPoint, coerce_tool_points, route_travel_distance

logger = logging.getLogger(__name__)

DEFAULT_ORACLE_EXPANSIONS = 20_000
MAX_CORNER_STARTS = 4


class RoutePhase(str, Enum):
    EXTENDING = "extending"
    BRIDGING = "bridging"
    DONE = "done"


@dataclass(slots=True)
class RouteResult:
    """Ordered tool positions plus bookkeeping about how they were reached."""

    points: list[ToolPoint]
    keys: list[SiteKey] = field(default_factory=list)
    bridges: int = 0
    unvisited: list[SiteKey] = field(default_factory=list)
    travel_distance: float = 0.0
    start: SiteKey | None = None

    @property
    def complete(self) -> bool:
        return not self.unvisited

    def to_payload(self) -> dict[str, object]:
        return {
            "route": [point.to_dict() for point in self.points],
            "travel_distance": float(self.travel_distance),
            "bridges": self.bridges,
            "unvisited": len(self.unvisited),
        }


def construct_route(
    graph: SiteGraph,
    *,
    start: SiteKey | None = None,
    max_expansions: int | None = DEFAULT_ORACLE_EXPANSIONS,
    return_to_start: bool = False,
    best_start: bool = False,
) -> RouteResult:
    """Walk the site graph greedily, bridging over visited sites when stuck.

    Extension always steps to the unvisited neighbor closest to an unvisited
    terminal (first discovered wins ties). With no unvisited neighbor left the
    walk bridges to the nearest unvisited site; when nothing is reachable it
    stops and the leftover sites are reported in ``unvisited``.

    The walk starts at ``start`` or, by default, the first site built. With
    ``best_start`` every site from ``candidate_start_sites`` is tried and the
    route covering the most sites with the least travel is kept.
    """

    started = time.perf_counter()
    referenced = graph.referenced_keys()
    if not referenced:
        return RouteResult(points=[])
    if start is not None and start not in graph.sites:
        raise ValueError(f"Unknown start site: {start}")

    if start is not None:
        starts = [start]
    elif best_start:
        starts = candidate_start_sites(graph)
    else:
        starts = [referenced[0]]

    result: RouteResult | None = None
    for candidate in starts:
        attempt = _walk(graph, candidate, referenced, max_expansions, return_to_start)
        if result is None or (len(attempt.unvisited), attempt.travel_distance) < (
            len(result.unvisited),
            result.travel_distance,
        ):
            result = attempt
    assert result is not None

    elapsed = time.perf_counter() - started
    logger.debug(
        "construct_route: %d site(s) -> %d point(s) from %d start(s), %d bridge(s), "
        "travel %.3f in %.2f ms",
        len(referenced),
        len(result.points),
        len(starts),
        result.bridges,
        result.travel_distance,
        elapsed * 1000.0,
    )
    if result.unvisited:
        logger.warning(
            "construct_route: %d site(s) unreachable from start %s were left out",
            len(result.unvisited),
            result.start,
        )
    return result


def _walk(
    graph: SiteGraph,
    start: SiteKey,
    referenced: list[SiteKey],
    max_expansions: int | None,
    return_to_start: bool,
) -> RouteResult:
    current = start
    keys: list[SiteKey] = [current]
    visited: set[SiteKey] = {current}
    remaining: set[SiteKey] = set(referenced)
    remaining.discard(current)
    bridges = 0
    phase = RoutePhase.EXTENDING

    while phase is not RoutePhase.DONE:
        if not remaining:
            phase = RoutePhase.DONE
        elif phase is RoutePhase.EXTENDING:
            candidates = [key for key in graph.neighbors(current) if key not in visited]
            if not candidates:
                phase = RoutePhase.BRIDGING
                continue
            current = min(
                candidates,
                key=lambda key: terminal_distance_score(
                    key, visited, graph, max_expansions=max_expansions
                ),
            )
            keys.append(current)
            visited.add(current)
            remaining.discard(current)
        else:
            bridge = find_bridge_path(current, remaining, graph)
            if bridge is None:
                phase = RoutePhase.DONE
                continue
            bridges += 1
            for key in bridge[1:]:
                keys.append(key)
                visited.add(key)
                remaining.discard(key)
            current = bridge[-1]
            phase = RoutePhase.EXTENDING

    if return_to_start and current != start and start in graph.neighbors(current):
        keys.append(start)

    points = [graph.sites[key].to_point() for key in keys]
    return RouteResult(
        points=points,
        keys=keys,
        bridges=bridges,
        unvisited=[key for key in referenced if key in remaining],
        travel_distance=route_travel_distance(points),
        start=start,
    )


def candidate_start_sites(graph: SiteGraph) -> list[SiteKey]:
    """Sites worth starting a walk from.

    Dead ends (a single neighbor) are the natural entry points. With more than
    four of them only those nearest the corners of their bounding box are
    kept; with none, the site closest to the origin is used.
    """

    dead_ends = [key for key, neighbors in graph.adjacency.items() if len(neighbors) == 1]
    if not dead_ends:
        return [min(graph.sites, key=lambda key: math.hypot(graph.sites[key].x, graph.sites[key].y))]
    if len(dead_ends) <= MAX_CORNER_STARTS:
        return dead_ends

    xs = [graph.sites[key].x for key in dead_ends]
    ys = [graph.sites[key].y for key in dead_ends]
    corners = [
        (min(xs), min(ys)),
        (max(xs), min(ys)),
        (min(xs), max(ys)),
        (max(xs), max(ys)),
    ]
    chosen: dict[SiteKey, None] = {}
    for cx, cy in corners:
        nearest = min(
            dead_ends,
            key=lambda key: math.hypot(graph.sites[key].x - cx, graph.sites[key].y - cy),
        )
        chosen.setdefault(nearest, None)
    return list(chosen)


def route_skeleton_points(
    points: Sequence[Any],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_expansions: int | None = DEFAULT_ORACLE_EXPANSIONS,
    return_to_start: bool = False,
    best_start: bool = False,
) -> list[ToolPoint]:
    """Order a cyclic skeleton point sequence into a tool visiting sequence."""

    if len(points) <= 1:
        return coerce_tool_points(points)
    graph = build_site_graph(points, tolerance=tolerance)
    result = construct_route(
        graph,
        max_expansions=max_expansions,
        return_to_start=return_to_start,
        best_start=best_start,
    )
    return result.points


def route_skeleton_loops(
    loops: Iterable[Sequence[Any]],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_expansions: int | None = DEFAULT_ORACLE_EXPANSIONS,
    return_to_start: bool = False,
    best_start: bool = False,
) -> RouteResult:
    loops = list(loops)
    if sum(len(loop) for loop in loops) <= 1:
        return degenerate_result([point for loop in loops for point in loop])
    graph = build_site_graph_from_loops(loops, tolerance=tolerance)
    return construct_route(
        graph,
        max_expansions=max_expansions,
        return_to_start=return_to_start,
        best_start=best_start,
    )


def route_medial_segments(
    segments: Iterable[Mapping[str, Any]],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_expansions: int | None = DEFAULT_ORACLE_EXPANSIONS,
    return_to_start: bool = False,
    best_start: bool = False,
) -> RouteResult:
    graph = build_site_graph_from_segments(segments, tolerance=tolerance)
    return construct_route(
        graph,
        max_expansions=max_expansions,
        return_to_start=return_to_start,
        best_start=best_start,
    )


def degenerate_result(points: Sequence[Any]) -> RouteResult:
    """Pass zero- or one-point input straight through."""

    return RouteResult(points=coerce_tool_points(points))


__all__ = [
    "DEFAULT_ORACLE_EXPANSIONS",
    "RoutePhase",
    "RouteResult",
    "candidate_start_sites",
    "construct_route",
    "route_skeleton_points",
    "route_skeleton_loops",
    "route_medial_segments",
    "degenerate_result",
]

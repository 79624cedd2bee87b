from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from .toolpath import ToolPoint, coerce_tool_point

DEFAULT_TOLERANCE = 0.01

SiteKey = tuple[int, int]


@dataclass(slots=True)
class Site:
    """Deduplicated skeleton coordinate and how often the input touched it."""

    key: SiteKey
    x: float
    y: float
    r: float = 0.0
    occurrences: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.occurrences == 1

    def to_point(self) -> ToolPoint:
        return ToolPoint(self.x, self.y, self.r)

    def to_dict(self) -> dict[str, float | int]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "r": float(self.r),
            "occurrences": self.occurrences,
        }


@dataclass(slots=True)
class SiteGraph:
    """Sites keyed by quantized coordinate plus an insertion-ordered adjacency."""

    sites: dict[SiteKey, Site] = field(default_factory=dict)
    adjacency: dict[SiteKey, list[SiteKey]] = field(default_factory=dict)
    tolerance: float = DEFAULT_TOLERANCE

    def neighbors(self, key: SiteKey) -> list[SiteKey]:
        return self.adjacency.get(key, [])

    def is_terminal(self, key: SiteKey) -> bool:
        # Sites missing from the map or the adjacency are isolated endpoints.
        site = self.sites.get(key)
        if site is None or key not in self.adjacency:
            return True
        return site.is_terminal

    def referenced_keys(self) -> list[SiteKey]:
        """Every key present as an adjacency entry or as a neighbor, in build order."""

        ordered: dict[SiteKey, None] = dict.fromkeys(self.adjacency)
        for neighbors in self.adjacency.values():
            for neighbor in neighbors:
                ordered.setdefault(neighbor, None)
        return list(ordered)

    def terminals(self) -> list[SiteKey]:
        return [key for key in self.sites if self.is_terminal(key)]

    def junctions(self) -> list[SiteKey]:
        return [key for key in self.sites if not self.is_terminal(key)]

    def to_payload(self) -> dict[str, list[dict[str, Any]]]:
        site_items = [{"key": list(key), **site.to_dict()} for key, site in self.sites.items()]
        edge_items: list[dict[str, Any]] = []
        for key, neighbors in self.adjacency.items():
            for neighbor in neighbors:
                edge_items.append({"source": list(key), "target": list(neighbor)})
        return {"sites": site_items, "edges": edge_items}

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(self.to_payload(), indent=indent)

    def save(self, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.to_json())
        return output_path


def quantize_key(x: float, y: float, tolerance: float = DEFAULT_TOLERANCE) -> SiteKey:
    qx = x / tolerance
    qy = y / tolerance
    if not (math.isfinite(qx) and math.isfinite(qy)):
        raise ValueError(f"Point ({x!r}, {y!r}) is out of range for tolerance {tolerance!r}.")
    return (round(qx), round(qy))


def squared_distance(graph: SiteGraph, a: SiteKey, b: SiteKey) -> float:
    first = graph.sites[a]
    second = graph.sites[b]
    dx = first.x - second.x
    dy = first.y - second.y
    return dx * dx + dy * dy


def build_site_graph(
    points: Sequence[Any],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
) -> SiteGraph:
    """Build the site map and adjacency for one cyclic point sequence."""

    return build_site_graph_from_loops([points], tolerance=tolerance)


def build_site_graph_from_loops(
    loops: Iterable[Sequence[Any]],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
) -> SiteGraph:
    """Build one graph from several cyclic sequences sharing sites by coordinate.

    Every point links to its predecessor and then its successor, wrapping
    around at both ends of its own loop. The first radius seen for a site is
    the one it keeps.
    """

    _check_tolerance(tolerance)
    graph = SiteGraph(tolerance=tolerance)
    for loop in loops:
        keys = [_register_point(graph, coerce_tool_point(raw)) for raw in loop]
        count = len(keys)
        for idx, key in enumerate(keys):
            neighbors = graph.adjacency.setdefault(key, [])
            if count < 2:
                continue
            _link(neighbors, key, keys[idx - 1])
            _link(neighbors, key, keys[(idx + 1) % count])
    return graph


def build_site_graph_from_segments(
    segments: Iterable[Mapping[str, Any]],
    *,
    tolerance: float = DEFAULT_TOLERANCE,
) -> SiteGraph:
    """Build a graph from medial-axis segments (``point0``/``point1`` records)."""

    _check_tolerance(tolerance)
    graph = SiteGraph(tolerance=tolerance)
    for segment in segments:
        try:
            raw_start, raw_end = segment["point0"], segment["point1"]
        except KeyError as exc:
            raise ValueError(f"Segment {segment!r} lacks point0/point1.") from exc
        start = _register_point(graph, coerce_tool_point(raw_start))
        end = _register_point(graph, coerce_tool_point(raw_end))
        start_neighbors = graph.adjacency.setdefault(start, [])
        end_neighbors = graph.adjacency.setdefault(end, [])
        _link(start_neighbors, start, end)
        _link(end_neighbors, end, start)
    return graph


def _register_point(graph: SiteGraph, point: ToolPoint) -> SiteKey:
    key = quantize_key(point.x, point.y, graph.tolerance)
    site = graph.sites.get(key)
    if site is None:
        site = Site(key=key, x=point.x, y=point.y, r=point.r)
        graph.sites[key] = site
    site.occurrences += 1
    return key


def _link(neighbors: list[SiteKey], key: SiteKey, other: SiteKey) -> None:
    if other != key and other not in neighbors:
        neighbors.append(other)


def _check_tolerance(tolerance: float) -> None:
    if not tolerance > 0:
        raise ValueError(f"Tolerance must be positive, got {tolerance!r}.")


__all__ = [
    "DEFAULT_TOLERANCE",
    "Site",
    "SiteKey",
    "SiteGraph",
    "quantize_key",
    "squared_distance",
    "build_site_graph",
    "build_site_graph_from_loops",
    "build_site_graph_from_segments",
]

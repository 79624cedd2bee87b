from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

RADIUS_BAND = 0.01


@dataclass(frozen=True, slots=True)
class ToolPoint:
    """A tool position on the cutting plane with the carve radius at that spot."""

    x: float
    y: float
    r: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "r": float(self.r)}


def coerce_tool_point(raw: Any) -> ToolPoint:
    """Accept a ``ToolPoint``, a mapping with x/y[/r|radius] or a 2/3-tuple."""

    if isinstance(raw, ToolPoint):
        return raw
    if isinstance(raw, Mapping):
        if "x" not in raw or "y" not in raw:
            raise ValueError(f"Point {raw!r} is missing an 'x' or 'y' coordinate.")
        radius = raw.get("r")
        if radius is None:
            radius = raw.get("radius")
        x, y = raw["x"], raw["y"]
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) not in (2, 3):
            raise ValueError(f"Point {raw!r} must have 2 or 3 components.")
        x, y = raw[0], raw[1]
        radius = raw[2] if len(raw) == 3 else None
    else:
        raise ValueError(f"Unsupported point value: {raw!r}")

    x = float(x)
    y = float(y)
    r = float(radius) if radius is not None else 0.0
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(r)):
        raise ValueError(f"Point {raw!r} has non-finite components.")
    return ToolPoint(x, y, r)


def coerce_tool_points(raw_points: Iterable[Any]) -> list[ToolPoint]:
    return [coerce_tool_point(raw) for raw in raw_points]


def segments_to_points(segments: Iterable[Mapping[str, Any]]) -> list[ToolPoint]:
    """Flatten medial-axis segments into their endpoint sequence (point0, point1, ...)."""

    points: list[ToolPoint] = []
    for segment in segments:
        try:
            start, end = segment["point0"], segment["point1"]
        except KeyError as exc:
            raise ValueError(f"Segment {segment!r} lacks point0/point1.") from exc
        points.append(coerce_tool_point(start))
        points.append(coerce_tool_point(end))
    return points


def route_travel_distance(points: Sequence[ToolPoint]) -> float:
    total = 0.0
    for a, b in zip(points, points[1:]):
        total += math.hypot(b.x - a.x, b.y - a.y)
    return total


def clamp_route_radii(points: Sequence[ToolPoint], max_radius: float) -> list[ToolPoint]:
    """Limit carve radii to ``max_radius`` for a V-bit of bounded depth.

    Where the radius crosses ``max_radius`` between two consecutive points an
    interpolated point at exactly ``max_radius`` is inserted so the depth
    change lands at the right spot once every radius is clamped.
    """

    if max_radius < 0:
        raise ValueError("max_radius must be non-negative.")

    limit = max_radius - RADIUS_BAND
    expanded: list[ToolPoint] = []
    for idx, current in enumerate(points):
        expanded.append(current)
        if idx + 1 >= len(points):
            continue
        following = points[idx + 1]
        crosses_down = current.r >= limit and following.r < limit
        crosses_up = current.r < limit and following.r >= limit
        if not (crosses_down or crosses_up) or following.r == current.r:
            continue
        t = (max_radius - current.r) / (following.r - current.r)
        if 0.0 < t < 1.0:
            expanded.append(
                ToolPoint(
                    current.x + t * (following.x - current.x),
                    current.y + t * (following.y - current.y),
                    max_radius,
                )
            )
    return [ToolPoint(p.x, p.y, min(p.r, max_radius)) for p in expanded]


__all__ = [
    "ToolPoint",
    "coerce_tool_point",
    "coerce_tool_points",
    "segments_to_points",
    "route_travel_distance",
    "clamp_route_radii",
]

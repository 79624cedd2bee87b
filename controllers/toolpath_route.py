"""Route computation helpers for skeleton point files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from PIL import Image

from models.graph_render import render_route_preview
from models.route import RouteResult, construct_route, degenerate_result
from models.route_artifacts import save_route_json
from models.site_graph import SiteGraph, build_site_graph_from_loops, build_site_graph_from_segments
from models.toolpath import clamp_route_radii
from models.utils.image_io import save_png
from models.utils.naming import canonical_sample_name, prefixed_name

from .data_paths import DataPaths
from .settings import RouteSettings, load_route_settings

logger = logging.getLogger(__name__)

INPUT_KINDS = ("points", "loops", "segments")


@dataclass(slots=True)
class RouteInput:
    kind: str
    data: list[Any]

    @property
    def point_count(self) -> int:
        if self.kind == "loops":
            return sum(len(loop) for loop in self.data)
        if self.kind == "segments":
            return 2 * len(self.data)
        return len(self.data)


@dataclass(slots=True)
class RouteFlowResult:
    result: RouteResult
    graph: SiteGraph | None
    route_payload: dict[str, object]
    route_path: Path | None
    graph_path: Path | None
    preview_path: Path | None
    route_preview: Image.Image | None
    message: str


def load_points_file(path: Path) -> RouteInput:
    """Read a JSON point file: a bare list, or an object keyed by points/loops/segments."""

    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"{path} does not exist.")
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    return parse_route_input(payload, source=str(path))


def parse_route_input(payload: Any, *, source: str = "input") -> RouteInput:
    if isinstance(payload, list):
        return RouteInput(kind="points", data=payload)
    if isinstance(payload, dict):
        for kind in INPUT_KINDS:
            value = payload.get(kind)
            if isinstance(value, list):
                if kind == "loops" and not all(isinstance(loop, list) for loop in value):
                    raise ValueError(f"{source}: every entry of 'loops' must be a list of points.")
                return RouteInput(kind=kind, data=value)
    raise ValueError(
        f"{source}: expected a list of points or an object with one of {', '.join(INPUT_KINDS)}."
    )


def compute_route_flow(
    route_input: RouteInput,
    *,
    sample_name: str,
    settings: RouteSettings | None = None,
    data_paths: DataPaths | None = None,
    write_artifacts: bool = True,
    render_preview: bool = True,
) -> RouteFlowResult:
    settings = settings or load_route_settings()

    graph: SiteGraph | None = None
    if route_input.kind == "segments":
        graph = build_site_graph_from_segments(route_input.data, tolerance=settings.tolerance)
    elif route_input.point_count > 1:
        loops = route_input.data if route_input.kind == "loops" else [route_input.data]
        graph = build_site_graph_from_loops(loops, tolerance=settings.tolerance)

    if graph is None:
        flat = route_input.data
        if route_input.kind == "loops":
            flat = [point for loop in route_input.data for point in loop]
        result = degenerate_result(flat)
    else:
        result = construct_route(
            graph,
            max_expansions=settings.oracle_expansion_limit,
            return_to_start=settings.return_to_start,
            best_start=settings.best_start,
        )

    if settings.max_radius is not None:
        result = replace(result, points=clamp_route_radii(result.points, settings.max_radius))

    base = canonical_sample_name(sample_name)
    metadata: dict[str, object] = {
        "sample": base,
        "input_kind": route_input.kind,
        "input_points": route_input.point_count,
        "tolerance": settings.tolerance,
        "complete": result.complete,
    }
    if settings.max_radius is not None:
        metadata["max_radius"] = settings.max_radius

    route_path: Path | None = None
    graph_path: Path | None = None
    preview_path: Path | None = None
    preview: Image.Image | None = None
    if render_preview:
        preview = render_route_preview(result.points, graph=graph, draw_radii=True)

    if write_artifacts:
        paths = data_paths or DataPaths.from_data_dir()
        paths.ensure_directories()
        route_path = paths.route_dir / prefixed_name("route", base, ".json")
        payload = save_route_json(result, route_path, metadata=metadata)
        if graph is not None:
            graph_path = graph.save(paths.graph_dir / prefixed_name("graph", base, ".json"))
        if preview is not None:
            preview_path = save_png(preview, paths.preview_dir / prefixed_name("preview", base, ".png"))
    else:
        payload = {**result.to_payload(), **metadata}

    message = (
        f"Routed {route_input.point_count} input point(s) into {len(result.points)} tool position(s) "
        f"with {result.bridges} bridge(s); travel {result.travel_distance:.3f}."
    )
    if not result.complete:
        message += f" {len(result.unvisited)} unreachable site(s) were omitted."
    logger.info("%s: %s", base, message)

    return RouteFlowResult(
        result=result,
        graph=graph,
        route_payload=payload,
        route_path=route_path,
        graph_path=graph_path,
        preview_path=preview_path,
        route_preview=preview,
        message=message,
    )


__all__ = [
    "RouteInput",
    "RouteFlowResult",
    "load_points_file",
    "parse_route_input",
    "compute_route_flow",
]

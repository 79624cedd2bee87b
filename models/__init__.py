"""Model utilities for the skeleton toolpath router."""

from .bridge import find_bridge_path
from .graph_render import render_graph_overlay, render_route_overlay, render_route_preview
from .route import (
    RoutePhase,
    RouteResult,
    candidate_start_sites,
    construct_route,
    route_medial_segments,
    route_skeleton_loops,
    route_skeleton_points,
)
from .route_artifacts import load_route_json, save_route_json
from .site_graph import (
    Site,
    SiteGraph,
    SiteKey,
    build_site_graph,
    build_site_graph_from_loops,
    build_site_graph_from_segments,
    quantize_key,
)
from .terminal_distance import UNREACHABLE, terminal_distance_score
from .toolpath import (
    ToolPoint,
    clamp_route_radii,
    coerce_tool_point,
    coerce_tool_points,
    route_travel_distance,
    segments_to_points,
)

__all__ = [
    "Site",
    "SiteKey",
    "SiteGraph",
    "quantize_key",
    "build_site_graph",
    "build_site_graph_from_loops",
    "build_site_graph_from_segments",
    "UNREACHABLE",
    "terminal_distance_score",
    "find_bridge_path",
    "RoutePhase",
    "RouteResult",
    "construct_route",
    "candidate_start_sites",
    "route_skeleton_points",
    "route_skeleton_loops",
    "route_medial_segments",
    "ToolPoint",
    "coerce_tool_point",
    "coerce_tool_points",
    "segments_to_points",
    "route_travel_distance",
    "clamp_route_radii",
    "save_route_json",
    "load_route_json",
    "render_graph_overlay",
    "render_route_overlay",
    "render_route_preview",
]

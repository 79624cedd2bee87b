from __future__ import annotations

import colorsys
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from .site_graph import SiteGraph
from .toolpath import ToolPoint

DEFAULT_HIGHLIGHT = (255, 255, 0)
DEFAULT_BACKGROUND = (0, 0, 0)
DEFAULT_CANVAS = (512, 512)
DEFAULT_MARGIN = 16


class CanvasTransform:
    """Maps plane coordinates onto a canvas, flipping Y so +Y points up."""

    def __init__(
        self,
        coords: np.ndarray,
        size: tuple[int, int],
        margin: int = DEFAULT_MARGIN,
    ) -> None:
        width, height = size
        self.height = height
        self.margin = margin
        if coords.size:
            self.lower = coords.min(axis=0)
            span = coords.max(axis=0) - self.lower
        else:
            self.lower = np.zeros(2)
            span = np.zeros(2)
        usable = np.array([width - 2 * margin, height - 2 * margin], dtype=float)
        span = np.where(span > 0, span, 1.0)
        self.scale = float(np.min(np.maximum(usable, 1.0) / span))

    def apply(self, coords: np.ndarray) -> np.ndarray:
        mapped = (coords - self.lower) * self.scale + self.margin
        mapped[:, 1] = self.height - mapped[:, 1]
        return mapped


def render_graph_overlay(
    graph: SiteGraph,
    base_image: Image.Image,
    *,
    edge_color: tuple[int, int, int] = DEFAULT_HIGHLIGHT,
    terminal_color: tuple[int, int, int] = (0, 255, 0),
    junction_color: tuple[int, int, int] = (255, 0, 0),
    node_radius: int = 2,
    edge_width: int = 1,
    transform: CanvasTransform | None = None,
) -> Image.Image:
    """Draw site edges and terminal/junction markers onto a copy of ``base_image``."""

    overlay = base_image.copy()
    draw = ImageDraw.Draw(overlay)
    keys = list(graph.sites)
    if not keys:
        return overlay
    coords = _site_coords(graph)
    transform = transform or CanvasTransform(coords, overlay.size)
    mapped = dict(zip(keys, (tuple(row) for row in transform.apply(coords))))

    for key, neighbors in graph.adjacency.items():
        for neighbor in neighbors:
            if neighbor in mapped and key in mapped:
                draw.line([mapped[key], mapped[neighbor]], fill=edge_color, width=edge_width)

    if node_radius > 0:
        for key, (px, py) in mapped.items():
            color = terminal_color if graph.is_terminal(key) else junction_color
            draw.ellipse(
                [(px - node_radius, py - node_radius), (px + node_radius, py + node_radius)],
                fill=color,
            )
    return overlay


def render_route_overlay(
    base_image: Image.Image,
    points: Sequence[ToolPoint],
    *,
    width: int = 3,
    draw_radii: bool = False,
    transform: CanvasTransform | None = None,
) -> Image.Image:
    """Draw a rainbow gradient route (blue start, red end) over the base image."""

    overlay = base_image.copy()
    if not points:
        return overlay
    draw = ImageDraw.Draw(overlay)
    coords = np.array([(p.x, p.y) for p in points], dtype=float)
    transform = transform or CanvasTransform(coords, overlay.size)
    mapped = [tuple(row) for row in transform.apply(coords)]

    if draw_radii:
        for point, (px, py) in zip(points, mapped):
            radius = point.r * transform.scale
            if radius <= 0:
                continue
            draw.ellipse(
                [(px - radius, py - radius), (px + radius, py + radius)],
                outline=(96, 96, 96),
            )

    segments = len(mapped) - 1
    for idx in range(segments):
        t = idx / max(1, segments - 1)
        draw.line([mapped[idx], mapped[idx + 1]], fill=_rainbow_color(t), width=width)
    return overlay


def render_route_preview(
    points: Sequence[ToolPoint],
    *,
    size: tuple[int, int] = DEFAULT_CANVAS,
    graph: SiteGraph | None = None,
    draw_radii: bool = False,
) -> Image.Image:
    """Render the route on a blank canvas, optionally over the site graph."""

    base = Image.new("RGB", size, DEFAULT_BACKGROUND)
    transform = None
    if graph is not None and graph.sites:
        transform = CanvasTransform(_site_coords(graph), size)
        base = render_graph_overlay(graph, base, edge_color=(64, 64, 64), transform=transform)
    return render_route_overlay(base, points, draw_radii=draw_radii, transform=transform)


def _site_coords(graph: SiteGraph) -> np.ndarray:
    return np.array([(site.x, site.y) for site in graph.sites.values()], dtype=float)


def _rainbow_color(t: float) -> tuple[int, int, int]:
    hue = (1.0 - t) * 2 / 3  # map 0..1 to blue->red
    r, g, b = colorsys.hsv_to_rgb(hue, 1.0, 1.0)
    return int(r * 255), int(g * 255), int(b * 255)


__all__ = [
    "CanvasTransform",
    "render_graph_overlay",
    "render_route_overlay",
    "render_route_preview",
]

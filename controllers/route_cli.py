"""Command-line entry point: order a skeleton point file into a toolpath."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from .data_paths import DataPaths
from .settings import load_data_dir, load_route_settings
from .toolpath_route import compute_route_flow, load_points_file

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Order skeleton / medial-axis points into a single tool route."
    )
    parser.add_argument("input", type=Path, help="JSON file with points, loops or segments.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Root directory for route and preview artifacts (default: config.toml data_dir).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Alternative config.toml to read routing defaults from.",
    )
    parser.add_argument("--tolerance", type=float, default=None, help="Site merge tolerance.")
    parser.add_argument(
        "--max-radius",
        type=float,
        default=None,
        help="Clamp carve radii to this value, inserting transition points.",
    )
    parser.add_argument(
        "--return-to-start",
        action="store_true",
        help="Close the route when the last site neighbors the first.",
    )
    parser.add_argument(
        "--best-start",
        action="store_true",
        help="Try each dead-end start and keep the shortest route.",
    )
    parser.add_argument("--no-preview", action="store_true", help="Skip the PNG preview.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        settings = load_route_settings(args.config)
        overrides: dict[str, object] = {}
        if args.tolerance is not None:
            if args.tolerance <= 0:
                raise ValueError("--tolerance must be positive.")
            overrides["tolerance"] = args.tolerance
        if args.max_radius is not None:
            overrides["max_radius"] = args.max_radius
        if args.return_to_start:
            overrides["return_to_start"] = True
        if args.best_start:
            overrides["best_start"] = True
        settings = replace(settings, **overrides)

        data_dir = args.data_dir or load_data_dir(args.config)
        route_input = load_points_file(args.input)
        flow = compute_route_flow(
            route_input,
            sample_name=args.input.name,
            settings=settings,
            data_paths=DataPaths.from_data_dir(data_dir),
            render_preview=not args.no_preview,
        )
    except (ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(flow.message)
    if flow.route_path is not None:
        print(f"Route written to {flow.route_path}")
    if flow.graph_path is not None:
        print(f"Site graph written to {flow.graph_path}")
    if flow.preview_path is not None:
        print(f"Preview written to {flow.preview_path}")
    return 0


__all__ = ["main", "parse_args"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

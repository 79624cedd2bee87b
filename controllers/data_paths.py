"""Shared filesystem layout helpers for routing artifacts."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _default_data_dir() -> Path:
    env_dir = os.environ.get("SKELETON_ROUTE_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.cwd() / "data"


@dataclass(slots=True)
class DataPaths:
    """Canonical directories for input point files, routes, site graphs, and previews."""

    points_dir: Path = Path("data/points")
    route_dir: Path = Path("data/routes")
    graph_dir: Path = Path("data/graphs")
    preview_dir: Path = Path("data/previews")

    def ensure_directories(self) -> None:
        self.points_dir.mkdir(parents=True, exist_ok=True)
        self.route_dir.mkdir(parents=True, exist_ok=True)
        self.graph_dir.mkdir(parents=True, exist_ok=True)
        self.preview_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_data_dir(cls, data_dir: Path | None = None) -> DataPaths:
        base = data_dir or _default_data_dir()
        base = base.expanduser().resolve()
        return cls(
            points_dir=base / "points",
            route_dir=base / "routes",
            graph_dir=base / "graphs",
            preview_dir=base / "previews",
        )


__all__ = ["DataPaths"]

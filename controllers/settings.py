"""Load routing defaults and the shared data directory from config.toml."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import tomllib

from models.route import DEFAULT_ORACLE_EXPANSIONS
from models.site_graph import DEFAULT_TOLERANCE

CONFIG_FILENAME = "config.toml"
CONFIG_SECTION = "skeleton_route"
DEFAULT_DATA_DIR = "data"


@dataclass(frozen=True, slots=True)
class RouteSettings:
    data_dir: str = DEFAULT_DATA_DIR
    tolerance: float = DEFAULT_TOLERANCE
    oracle_expansion_limit: int | None = DEFAULT_ORACLE_EXPANSIONS
    max_radius: float | None = None
    return_to_start: bool = False
    best_start: bool = False


def load_route_settings(config_path: Path | None = None) -> RouteSettings:
    """Return routing settings from config.toml, falling back to defaults."""

    path = (config_path or _project_root() / CONFIG_FILENAME).expanduser().resolve()
    return _read_settings(path)


def load_data_dir(config_path: Path | None = None) -> Path:
    """Return the canonical data directory resolved from config.toml."""

    configured = load_route_settings(config_path).data_dir
    return _resolve_path(configured)


@lru_cache(maxsize=8)
def _read_settings(config_path: Path) -> RouteSettings:
    if not config_path.is_file():
        return RouteSettings()

    with config_path.open("rb") as handle:
        config = tomllib.load(handle)

    section = config.get(CONFIG_SECTION)
    if not isinstance(section, dict):
        return RouteSettings()

    defaults = RouteSettings()
    data_dir = section.get("data_dir")
    if not (isinstance(data_dir, str) and data_dir.strip()):
        data_dir = defaults.data_dir

    tolerance = _number(section, "tolerance", defaults.tolerance)
    if tolerance is None or tolerance <= 0:
        raise ValueError(f"{config_path}: tolerance must be a positive number.")

    limit = section.get("oracle_expansion_limit", defaults.oracle_expansion_limit)
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"{config_path}: oracle_expansion_limit must be an integer.")

    max_radius = _number(section, "max_radius", None)
    if max_radius is not None and max_radius < 0:
        raise ValueError(f"{config_path}: max_radius must be non-negative.")

    return RouteSettings(
        data_dir=data_dir,
        tolerance=tolerance,
        oracle_expansion_limit=limit or None,
        max_radius=max_radius,
        return_to_start=_flag(section, "return_to_start", defaults.return_to_start),
        best_start=_flag(section, "best_start", defaults.best_start),
    )


def _number(section: dict[str, Any], key: str, default: float | None) -> float | None:
    value = section.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Config key '{key}' must be a number, got {value!r}.")
    return float(value)


def _flag(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"Config key '{key}' must be true or false, got {value!r}.")
    return value


def _resolve_path(raw_path: str) -> Path:
    path = Path(raw_path).expanduser()
    if path.is_absolute():
        return path.resolve()
    return (_project_root() / path).resolve()


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


__all__ = ["RouteSettings", "load_route_settings", "load_data_dir"]

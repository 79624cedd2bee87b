from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .route import RouteResult
from .toolpath import ToolPoint, coerce_tool_points


def save_route_json(
    result: RouteResult,
    output_path: Path,
    *,
    metadata: dict[str, object] | None = None,
) -> dict[str, object]:
    payload = {**result.to_payload(), **(metadata or {})}
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2))
    return payload


def load_route_json(path: Path) -> list[ToolPoint]:
    """Read back the ordered tool points written by ``save_route_json``."""

    payload: Any = json.loads(Path(path).read_text())
    if not isinstance(payload, dict) or not isinstance(payload.get("route"), list):
        raise ValueError(f"{path} does not contain a 'route' list.")
    return coerce_tool_points(payload["route"])


__all__ = ["save_route_json", "load_route_json"]

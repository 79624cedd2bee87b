"""Shared helpers to keep artifact filenames consistent across routing stages."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


# Canonical prefixes for each stage.
STAGE_PREFIXES: dict[str, str] = {
    "points": "points_",
    "graph": "graph_",
    "route": "route_",
    "preview": "preview_",
}


def known_prefixes() -> tuple[str, ...]:
    return tuple(STAGE_PREFIXES.values())


def strip_prefix(value: str, *, extra: Iterable[str] | None = None) -> str:
    """Remove and return ``value`` without any known prefix."""

    prefixes = list(known_prefixes())
    if extra:
        prefixes.extend(extra)
    for prefix in prefixes:
        if value.startswith(prefix) and len(value) > len(prefix):
            return value[len(prefix) :]
    return value


def apply_stage_prefix(stage: str, base: str) -> str:
    """Return ``base`` prefixed for ``stage`` (ensuring no duplicate prefixes)."""

    try:
        prefix = STAGE_PREFIXES[stage.strip().lower()]
    except KeyError as exc:  # pragma: no cover - developer errors
        raise KeyError(f"Unknown stage '{stage}'") from exc
    return prefix + strip_prefix(base)


def prefixed_name(stage: str, base: str, suffix: str) -> str:
    return f"{apply_stage_prefix(stage, base)}{suffix}"


def canonical_sample_name(path: Path | str) -> str:
    """Best-effort attempt at deriving the logical sample name from a path."""

    stem = Path(path).stem
    cleaned = strip_prefix(stem)
    return cleaned or stem


__all__ = [
    "STAGE_PREFIXES",
    "apply_stage_prefix",
    "canonical_sample_name",
    "known_prefixes",
    "prefixed_name",
    "strip_prefix",
]

from __future__ import annotations

from .scenes import (
    bounds_from_positions,
    error_to_item,
    presentation_to_item,
    scene_to_item,
    snapshot_to_meta,
    value_to_item,
)

__all__ = [
    "bounds_from_positions",
    "scene_to_item",
    "value_to_item",
    "error_to_item",
    "snapshot_to_meta",
    "presentation_to_item",
]

from __future__ import annotations

from typing import Any

import numpy as np

from ...core.entry import EntrySnapshot
from ...core.errors import LoadFailure, ResolveTimeout
from ...core.presenter import Presentation
from ...core.scene import Scene


def bounds_from_positions(pos: np.ndarray) -> dict[str, list[float]]:
    if pos.size == 0:
        return {"min": [0.0, 0.0, 0.0], "max": [0.0, 0.0, 0.0]}
    bounds_min = pos.min(axis=0)
    bounds_max = pos.max(axis=0)
    return {"min": bounds_min.tolist(), "max": bounds_max.tolist()}


def scene_to_item(scene: Scene, *, key: str) -> dict[str, Any]:
    schema: dict[str, dict[str, Any]] = {"position": {"type": "float32", "components": 3}}
    if scene.colors is not None:
        schema["color"] = {"type": "uint8", "components": 3, "normalized": True}

    return {
        "name": scene.name,
        "title": scene.title,
        "tags": list(scene.tags),
        "background": [float(c) for c in scene.background],
        "pointSize": float(scene.point_size),
        "pointCount": scene.point_count,
        "bounds": bounds_from_positions(scene.positions),
        "endianness": "little",
        "interleaved": scene.colors is not None,
        "bytesPerPoint": scene.bytes_per_point,
        "schema": schema,
        "payloads": {
            "points": {"url": f"/api/scenes/{key}/payloads/points"},
        },
    }


def value_to_item(value: Any, *, key: str) -> Any:
    if isinstance(value, Scene):
        return scene_to_item(value, key=key)
    if isinstance(value, (dict, list, str, int, float, bool)) or value is None:
        return value
    # Non-scene resources are opaque to the host.
    return {"type": type(value).__name__, "repr": repr(value)}


def error_to_item(exc: BaseException) -> dict[str, Any]:
    item: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, LoadFailure):
        item["cause"] = type(exc.cause).__name__
    if isinstance(exc, ResolveTimeout):
        item["timeoutS"] = float(exc.timeout_s)
    return item


def snapshot_to_meta(snap: EntrySnapshot[Any]) -> dict[str, Any]:
    return {
        "key": str(snap.key),
        "state": snap.state.value,
        "waiters": int(snap.waiters),
        "error": error_to_item(snap.error) if snap.error is not None else None,
    }


def presentation_to_item(p: Presentation[Any]) -> dict[str, Any]:
    key = str(p.key)
    out: dict[str, Any] = {"key": key, "kind": p.kind.value}
    if p.value is not None:
        out["scene"] = value_to_item(p.value, key=key)
    if p.error is not None:
        out["error"] = error_to_item(p.error)
    if p.placeholder is not None:
        out["placeholder"] = p.placeholder
    return out

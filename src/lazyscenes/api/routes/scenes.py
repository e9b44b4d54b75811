from __future__ import annotations

from collections.abc import Hashable
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from starlette.responses import Response

from ...core.entry import EntryState
from ...core.errors import RegistryClosedError, ResolveTimeout, UnknownKeyError
from ...core.presenter import PresentationKind, ScenePresenter
from ...core.registry import LazyRegistry
from ...core.scene import Scene
from ...logging_utils import get_logger
from ..parsing import parse_bool
from ..serializers import presentation_to_item, snapshot_to_meta

logger = get_logger(__name__)

_STATUS_BY_KIND = {
    PresentationKind.READY: 200,
    PresentationKind.BLANK: 202,
    PresentationKind.LOADING: 202,
}


def _lookup_key(registry: LazyRegistry[Any], raw: str) -> Hashable:
    """Map a URL path segment back to a registered key.

    Keys are not required to be strings, so fall back to comparing `str(key)`.
    """

    if registry.has(raw):
        return raw
    for key in registry.keys():
        if str(key) == raw:
            return key
    raise HTTPException(status_code=404, detail="Unknown scene")


def mount_scenes_api(app: FastAPI, registry: LazyRegistry[Any], presenter: ScenePresenter[Any]) -> None:
    """Mount the scene endpoints on `app`, backed by `registry`."""

    @app.get("/api/scenes")
    def list_scenes() -> list[dict[str, Any]]:
        # Registration order, which is also the catalog order.
        return [{"key": str(k), "state": registry.state(k).value} for k in registry.keys()]

    @app.get("/api/scenes/{key}")
    async def get_scene(key: str, wait: str | None = None) -> JSONResponse:
        k = _lookup_key(registry, key)
        try:
            do_wait = parse_bool(wait, field="wait") if wait is not None else True
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex)) from ex

        try:
            p = await presenter.apresent(k) if do_wait else presenter.present(k)
        except UnknownKeyError as ex:
            raise HTTPException(status_code=404, detail="Unknown scene") from ex
        except RegistryClosedError as ex:
            raise HTTPException(status_code=503, detail=str(ex)) from ex

        if p.kind is PresentationKind.ERROR:
            logger.warning("Scene %r unavailable: %s", k, p.error)
            status = 504 if isinstance(p.error, ResolveTimeout) else 502
        else:
            status = _STATUS_BY_KIND[p.kind]
        return JSONResponse(status_code=status, content=presentation_to_item(p))

    @app.get("/api/scenes/{key}/meta")
    def get_scene_meta(key: str) -> dict[str, Any]:
        k = _lookup_key(registry, key)
        return snapshot_to_meta(registry.peek(k))

    @app.post("/api/scenes/{key}/prefetch")
    def prefetch_scene(key: str) -> dict[str, Any]:
        k = _lookup_key(registry, key)
        try:
            state = registry.prefetch(k)
        except RegistryClosedError as ex:
            raise HTTPException(status_code=503, detail=str(ex)) from ex
        return {"key": str(k), "state": state.value}

    @app.get("/api/scenes/{key}/payloads/points")
    def get_scene_points(key: str) -> Response:
        k = _lookup_key(registry, key)
        snap = registry.peek(k)
        if snap.state is not EntryState.READY:
            raise HTTPException(status_code=409, detail=f"Scene is {snap.state.value}, not ready")
        scene = snap.value
        if not isinstance(scene, Scene):
            raise HTTPException(status_code=404, detail="Scene has no point payload")

        return Response(
            content=scene.interleaved_points(),
            media_type="application/octet-stream",
            headers={
                "X-Point-Count": str(scene.point_count),
                "X-Bytes-Per-Point": str(scene.bytes_per_point),
            },
        )

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import RegistrySettings
from ..core.presenter import PresentationOptions, ScenePresenter
from ..core.registry import LazyRegistry
from ..scenes import create_scene_registry
from .routes import mount_scenes_api


def create_api_app(
    registry: LazyRegistry[Any] | None = None,
    *,
    options: PresentationOptions | None = None,
    settings: RegistrySettings | None = None,
) -> FastAPI:
    """Create the HTTP host for a registry.

    Without a registry the demo catalog is served from a fresh registry that is
    closed when the app shuts down. Caller-supplied registries stay open.
    """

    settings = settings or RegistrySettings.from_env()
    owns_registry = registry is None
    if registry is None:
        registry = create_scene_registry(settings=settings)
    if options is None:
        options = PresentationOptions(delay_s=settings.loading_delay_s, timeout_s=settings.resolve_timeout_s)
    presenter = ScenePresenter(registry, options)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_registry:
            registry.close(wait=False)

    app = FastAPI(title="lazyscenes", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.registry = registry
    app.state.presenter = presenter
    mount_scenes_api(app, registry, presenter)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


__all__ = ["create_api_app"]

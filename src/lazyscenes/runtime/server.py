from __future__ import annotations

import contextlib
import os
import socket
import threading
import time
import webbrowser
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

import httpx
import uvicorn

from ..core.registry import LazyRegistry
from ..logging_utils import get_logger
from ..scenes import create_scene_registry
from ..sdk.client import SceneClient
from .app import create_app

logger = get_logger(__name__)


@dataclass(frozen=True)
class SceneHost:
    host: str
    port: int
    url: str
    registry: LazyRegistry[Any]

    def client(self) -> SceneClient:
        return SceneClient(self.url.rstrip("/"))

    def resolve(self, key: Hashable, *, timeout: float | None = None) -> Any:
        """Resolve in-process, sharing the cache with HTTP callers."""
        return self.registry.resolve(key, timeout=timeout)

    def prefetch(self, key: Hashable) -> str:
        return self.registry.prefetch(key).value


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Probe `GET /healthz` on a lazyscenes host."""

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            data = r.json()
            return bool(data.get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    open_browser: bool = True,
    registry: LazyRegistry[Any] | None = None,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
) -> SceneHost | SceneClient:
    """Serve a scene registry over HTTP with a single call.

    Behavior:
    - If LAZYSCENES_URL is set, attach to that host (client mode) unless
      `new_server=True`.
    - Otherwise, if `port != 0` and a host is already reachable at
      http://{host}:{port}, attach to it unless `new_server=True`.
    - Otherwise start uvicorn in a daemon thread and return a `SceneHost`.

    `port=0` means "pick a free port", so there's nothing to attach to.
    """

    env_url = _normalize_base_url(os.getenv("LAZYSCENES_URL", ""))

    # 1) Try attaching to an explicitly provided host.
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to existing host at %s", env_url)
            if open_browser:
                webbrowser.open(env_url + "/api/scenes")
            return SceneClient(env_url)

    # 2) Try attaching to host/port if they are explicitly chosen.
    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to existing host at %s", default_url)
            if open_browser:
                webbrowser.open(default_url + "/api/scenes")
            return SceneClient(default_url)

    # 3) Start a fresh host.
    if port == 0:
        port = _find_free_port(host)

    if registry is None:
        registry = create_scene_registry()
    app = create_app(registry)

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Give it a moment so a subsequent client probe doesn't race with startup.
    time.sleep(0.05)

    url = f"http://{host}:{port}/"
    logger.info("Serving %d scene(s) at %s", len(registry), url)
    if open_browser:
        webbrowser.open(url + "api/scenes")

    return SceneHost(host=host, port=port, url=url, registry=registry)

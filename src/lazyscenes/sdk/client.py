from __future__ import annotations

from typing import Any

import httpx
import numpy as np

from ..core.errors import UnknownKeyError


class SceneClient:
    """HTTP client for a running lazyscenes host.

    Contract (current):
    - GET  /api/scenes
    - GET  /api/scenes/{key}?wait=0|1      (presentation; 200/202/502/504)
    - GET  /api/scenes/{key}/meta
    - POST /api/scenes/{key}/prefetch
    - GET  /api/scenes/{key}/payloads/points   (octet-stream)

    The point payload is interleaved:
      - XYZ: 3*float32 little-endian
      - optional RGB: 3*uint8
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        http: httpx.Client | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        # A caller-owned client (e.g. a FastAPI TestClient) is reused as-is.
        self._http = http

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self._http is not None:
            return self._http.request(method, path, **kwargs)
        with httpx.Client(base_url=self.base_url, timeout=self.timeout_s) as client:
            return client.request(method, path, **kwargs)

    @staticmethod
    def _raise_for(res: httpx.Response, key: str | None = None, *, allowed: tuple[int, ...] = ()) -> None:
        if res.status_code in allowed:
            return
        if res.status_code == 404 and key is not None:
            raise UnknownKeyError(key)
        if res.status_code >= 400:
            raise RuntimeError(f"Request failed: {res.status_code} {res.text}")

    def healthz(self) -> bool:
        res = self._request("GET", "/healthz")
        return res.status_code == 200 and bool(res.json().get("ok"))

    def list_scenes(self) -> list[dict[str, Any]]:
        res = self._request("GET", "/api/scenes")
        self._raise_for(res)
        return list(res.json())

    def get_scene(self, key: str, *, wait: bool = True) -> dict[str, Any]:
        """Return the host's presentation of a scene.

        Load failures and timeouts come back as a presentation with
        `kind == "error"` rather than an exception, like any other outcome.
        """

        res = self._request("GET", f"/api/scenes/{key}", params={"wait": "1" if wait else "0"})
        self._raise_for(res, key, allowed=(502, 504))
        return dict(res.json())

    def get_meta(self, key: str) -> dict[str, Any]:
        res = self._request("GET", f"/api/scenes/{key}/meta")
        self._raise_for(res, key)
        return dict(res.json())

    def prefetch(self, key: str) -> str:
        res = self._request("POST", f"/api/scenes/{key}/prefetch")
        self._raise_for(res, key)
        return str(res.json()["state"])

    def fetch_points(self, key: str) -> tuple[np.ndarray, np.ndarray | None]:
        """Download a ready scene's points as (positions, colors)."""

        res = self._request("GET", f"/api/scenes/{key}/payloads/points")
        self._raise_for(res, key)

        n = int(res.headers["x-point-count"])
        stride = int(res.headers["x-bytes-per-point"])
        raw = np.frombuffer(res.content, dtype=np.uint8)
        if raw.size != n * stride:
            raise RuntimeError(f"Point payload has {raw.size} bytes, expected {n * stride}")

        if stride == 12:
            return raw.view("<f4").reshape(n, 3).copy(), None
        if stride != 15:
            raise RuntimeError(f"Unsupported point stride: {stride}")

        rows = raw.reshape(n, 15)
        positions = np.ascontiguousarray(rows[:, 0:12]).view("<f4").reshape(n, 3)
        colors = np.ascontiguousarray(rows[:, 12:15])
        return positions, colors

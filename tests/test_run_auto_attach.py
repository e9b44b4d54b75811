from __future__ import annotations

import time

from lazyscenes.core import LazyRegistry


def _wait_alive(url: str, timeout_s: float = 5.0) -> None:
    from lazyscenes.runtime.server import _is_server_alive

    deadline = time.monotonic() + timeout_s
    while not _is_server_alive(url):
        if time.monotonic() > deadline:
            raise AssertionError(f"host at {url} did not come up")
        time.sleep(0.05)


def test_run_serves_registry_and_auto_attaches() -> None:
    """A second run() against the same host/port attaches instead of starting a server."""

    import lazyscenes
    from lazyscenes.runtime.server import SceneHost
    from lazyscenes.sdk.client import SceneClient

    registry = LazyRegistry({"hello": lambda: {"greeting": "hi"}})
    server = lazyscenes.run(host="127.0.0.1", port=0, open_browser=False, new_server=True, registry=registry)
    assert isinstance(server, SceneHost)
    _wait_alive(server.url.rstrip("/"))

    attached = lazyscenes.run(host=server.host, port=server.port, open_browser=False)
    assert isinstance(attached, SceneClient)
    assert attached.base_url == f"http://{server.host}:{server.port}"

    # HTTP and in-process callers share one cache.
    body = attached.get_scene("hello")
    assert body["scene"] == {"greeting": "hi"}
    assert server.resolve("hello") is registry.resolve("hello")


def test_run_new_server_ignores_env_url(monkeypatch) -> None:
    import lazyscenes
    from lazyscenes.runtime.server import SceneHost

    s1 = lazyscenes.run(host="127.0.0.1", port=0, open_browser=False, new_server=True)
    _wait_alive(s1.url.rstrip("/"))
    monkeypatch.setenv("LAZYSCENES_URL", f"http://{s1.host}:{s1.port}")

    s2 = lazyscenes.run(host="127.0.0.1", port=0, open_browser=False, new_server=True)

    assert isinstance(s2, SceneHost)
    assert (s2.host, s2.port) != (s1.host, s1.port)
    assert list(s2.registry.keys()) == ["xmas", "panorama", "rosePetals"]

from __future__ import annotations

import asyncio
import functools
import sys
import uuid
from pathlib import Path

import pytest

from lazyscenes.core import LazyRegistry, call_loader_blocking, import_loader, is_async_loader


def _write_module(tmp_path: Path, body: str) -> str:
    name = f"lazy_scene_mod_{uuid.uuid4().hex}"
    (tmp_path / f"{name}.py").write_text(body)
    return name


def test_import_loader_defers_the_import(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.syspath_prepend(str(tmp_path))
    name = _write_module(
        tmp_path,
        "BUILDS = []\n"
        "def build():\n"
        "    BUILDS.append(1)\n"
        "    return {'title': 'demo'}\n",
    )

    with LazyRegistry({"demo": import_loader(f"{name}:build")}) as reg:
        assert name not in sys.modules

        assert reg.resolve("demo", timeout=5) == {"title": "demo"}
        assert name in sys.modules
        assert reg.resolve("demo") == {"title": "demo"}
        assert sys.modules[name].BUILDS == [1]


def test_import_loader_returns_non_callable_attributes_as_is(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.syspath_prepend(str(tmp_path))
    name = _write_module(
        tmp_path,
        "SCENE = ('static', 3)\n"
        "class Factory:\n"
        "    @staticmethod\n"
        "    def make():\n"
        "        return 'made'\n",
    )

    assert import_loader(f"{name}:SCENE")() == ("static", 3)
    assert import_loader(f"{name}:Factory.make")() == "made"


@pytest.mark.parametrize("target", ["", "module_only", ":attr", "module:", "  "])
def test_import_loader_rejects_malformed_targets(target: str) -> None:
    with pytest.raises(ValueError):
        import_loader(target)


def test_missing_module_becomes_a_load_failure() -> None:
    from lazyscenes.core import LoadFailure

    with LazyRegistry({"ghost": import_loader("lazyscenes_no_such_module:build")}) as reg:
        with pytest.raises(LoadFailure) as exc_info:
            reg.resolve("ghost", timeout=5)
        assert isinstance(exc_info.value.cause, ModuleNotFoundError)


def test_is_async_loader() -> None:
    async def coro() -> int:
        return 1

    class AsyncCallable:
        async def __call__(self) -> int:
            return 2

    async def with_arg(x: int) -> int:
        return x

    assert is_async_loader(coro)
    assert is_async_loader(AsyncCallable())
    assert is_async_loader(functools.partial(with_arg, 3))
    assert not is_async_loader(lambda: 1)
    assert not is_async_loader(import_loader("json:dumps"))


def test_call_loader_blocking_handles_both_kinds() -> None:
    async def coro() -> str:
        await asyncio.sleep(0)
        return "async"

    assert call_loader_blocking(lambda: "sync") == "sync"
    assert call_loader_blocking(coro) == "async"

from __future__ import annotations

import asyncio
import importlib
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, Union

T = TypeVar("T")

# A loader takes no arguments and either returns the resource or an awaitable
# producing it. Failures are raised.
Loader = Callable[[], Union[T, Awaitable[T]]]


def is_async_loader(loader: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(loader):
        return True
    call = getattr(loader, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


async def _await(awaitable: Awaitable[T]) -> T:
    return await awaitable


def call_loader_blocking(loader: Loader[T]) -> T:
    """Run a loader to completion in the current thread.

    Must not be called from a thread that is running an event loop.
    """

    if is_async_loader(loader):
        return asyncio.run(_await(loader()))  # type: ignore[arg-type]
    result = loader()
    if inspect.isawaitable(result):
        return asyncio.run(_await(result))
    return result  # type: ignore[return-value]


class ImportLoader:
    """Loader that imports `module:attr` on first call.

    If the attribute is callable it is treated as a factory and called with no
    arguments, so `"pkg.scenes.xmas:build"` yields the built scene.
    """

    def __init__(self, target: str) -> None:
        module, sep, attr = str(target).strip().partition(":")
        if not sep or not module or not attr:
            raise ValueError(f"Import target must look like 'package.module:attr', got {target!r}")
        self.module = module
        self.attr = attr

    def __call__(self) -> Any:
        mod = importlib.import_module(self.module)
        obj: Any = mod
        for part in self.attr.split("."):
            obj = getattr(obj, part)
        if callable(obj):
            obj = obj()
        return obj

    def __repr__(self) -> str:
        return f"ImportLoader({self.module}:{self.attr})"


def import_loader(target: str) -> ImportLoader:
    return ImportLoader(target)

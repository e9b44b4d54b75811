from __future__ import annotations

import asyncio
import threading
from collections.abc import Hashable, Iterator, Mapping
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Generic, TypeVar

from ..config import RegistrySettings
from ..logging_utils import get_logger
from .entry import AsyncWaiter, Entry, EntrySnapshot, EntryState, Outcome, ThreadWaiter
from .errors import DuplicateKeyError, LoadFailure, RegistryClosedError, ResolveTimeout, UnknownKeyError
from .loaders import Loader, call_loader_blocking

T = TypeVar("T")

logger = get_logger(__name__)


def _in_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class RegistryKeys:
    """Live view of the registered keys, in registration order.

    Each iteration walks the keys lazily, so keys registered while iterating are
    picked up and re-iterating starts over.
    """

    def __init__(self, registry: LazyRegistry[Any]) -> None:
        self._registry = registry

    def __iter__(self) -> Iterator[Hashable]:
        i = 0
        while True:
            with self._registry._lock:
                if i >= len(self._registry._order):
                    return
                key = self._registry._order[i]
            yield key
            i += 1

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, key: object) -> bool:
        return self._registry.has(key)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"RegistryKeys({list(self)!r})"


class LazyRegistry(Generic[T]):
    """Keyed registry that loads each resource at most once, on first request.

    Loads are single-flight: the first caller for an unloaded key starts the
    loader, later callers attach to the same in-flight load, and the outcome
    (value or `LoadFailure`) is cached for the life of the registry.

    Thread callers use `resolve()`; asyncio callers use `aresolve()`. Both may
    wait on the same load at the same time.
    """

    def __init__(
        self,
        loaders: Mapping[Hashable, Loader[T]] | None = None,
        *,
        settings: RegistrySettings | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._entries: dict[Hashable, Entry[T]] = {}
        self._order: list[Hashable] = []
        self.settings = settings or RegistrySettings()
        self._executor = executor
        self._owns_executor = executor is None
        self._closed = False

        if loaders:
            for key, loader in loaders.items():
                self.register(key, loader)

    # -- registration / queries -------------------------------------------------

    def register(self, key: Hashable, loader: Loader[T]) -> None:
        if not callable(loader):
            raise TypeError(f"Loader for {key!r} must be callable, got {type(loader).__name__}")
        with self._lock:
            self._require_open()
            if key in self._entries:
                raise DuplicateKeyError(key)
            self._entries[key] = Entry(key=key, loader=loader)
            self._order.append(key)
        logger.debug("Registered scene %r", key)

    def has(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> RegistryKeys:
        return RegistryKeys(self)

    def peek(self, key: Hashable) -> EntrySnapshot[T]:
        return self._entry(key).snapshot()

    def state(self, key: Hashable) -> EntryState:
        return self._entry(key).snapshot().state

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.keys())

    def __repr__(self) -> str:
        with self._lock:
            states = {str(k): e.state.value for k, e in self._entries.items()}
        return f"LazyRegistry({states!r})"

    # -- resolution -------------------------------------------------------------

    def resolve(self, key: Hashable, *, timeout: float | None = None) -> T:
        """Return the resource for `key`, loading it on first use.

        Blocks the calling thread while the load is in flight. `timeout` bounds
        only this caller's wait; the load keeps running and caches its outcome.
        """

        self._require_open()
        entry = self._entry(key)
        settled = entry.outcome()
        if settled is not None:
            return settled.unwrap()

        if _in_running_loop():
            raise RuntimeError(
                f"resolve({key!r}) would block the running event loop; use 'await registry.aresolve(...)'"
            )

        waiter = ThreadWaiter()
        settled, claimed = entry.join(waiter)
        if settled is not None:
            return settled.unwrap()
        if claimed:
            self._start_in_executor(entry)

        if not waiter.wait(timeout):
            entry.detach(waiter)
            # The load may have settled between the timeout and the detach.
            if waiter.outcome is None:
                raise ResolveTimeout(key, float(timeout))  # type: ignore[arg-type]
        assert waiter.outcome is not None
        return waiter.outcome.unwrap()

    async def aresolve(self, key: Hashable, *, timeout: float | None = None) -> T:
        """Coroutine flavour of `resolve()`.

        Cancelling the awaiting task (or hitting `timeout`) only detaches this
        caller; the shared load is not cancelled.
        """

        self._require_open()
        entry = self._entry(key)
        settled = entry.outcome()
        if settled is not None:
            return settled.unwrap()

        waiter = AsyncWaiter(asyncio.get_running_loop())
        settled, claimed = entry.join(waiter)
        if settled is not None:
            return settled.unwrap()
        if claimed:
            # The load runs on a registry thread, not on this caller's loop,
            # so it outlives the caller and its loop.
            self._start_in_executor(entry)

        try:
            if timeout is None:
                outcome = await waiter.future
            else:
                outcome = await asyncio.wait_for(waiter.future, timeout)
        except asyncio.TimeoutError:
            entry.detach(waiter)
            raise ResolveTimeout(key, float(timeout)) from None  # type: ignore[arg-type]
        except asyncio.CancelledError:
            entry.detach(waiter)
            raise
        return outcome.unwrap()

    def prefetch(self, key: Hashable) -> EntryState:
        """Start loading `key` in the background if nobody has yet. Never blocks."""

        self._require_open()
        entry = self._entry(key)
        _, claimed = entry.join(None)
        if claimed:
            self._start_in_executor(entry)
        return entry.snapshot().state

    # -- lifecycle --------------------------------------------------------------

    def close(self, *, wait: bool = True) -> None:
        """Stop accepting work and shut down the background loader threads.

        Loads already started run to completion.
        """

        with self._lock:
            if self._closed:
                return
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None and self._owns_executor:
            executor.shutdown(wait=wait)
        logger.debug("Registry closed (%d scene(s))", len(self))

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> LazyRegistry[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- internals --------------------------------------------------------------

    def _require_open(self) -> None:
        if self._closed:
            raise RegistryClosedError()

    def _entry(self, key: Hashable) -> Entry[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                raise UnknownKeyError(key, list(self._order))
            return entry

    def _get_executor(self) -> Executor:
        with self._lock:
            self._require_open()
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers,
                    thread_name_prefix="lazyscenes-load",
                )
            return self._executor

    def _start_in_executor(self, entry: Entry[T]) -> None:
        try:
            self._get_executor().submit(self._load_blocking, entry)
        except RuntimeError as exc:
            # Closed registry or executor shut down: the claimed load can never run.
            self._fail(entry, exc)

    def _load_blocking(self, entry: Entry[T]) -> None:
        # Coroutine loaders get a private event loop on this worker thread.
        try:
            value = call_loader_blocking(entry.loader)
        except Exception as exc:
            self._fail(entry, exc)
        except BaseException as exc:
            self._fail(entry, exc)
            raise
        else:
            self._succeed(entry, value)

    def _succeed(self, entry: Entry[T], value: T) -> None:
        entry.settle(Outcome(value=value))

    def _fail(self, entry: Entry[T], exc: BaseException) -> None:
        logger.debug("Scene %r failed to load: %r", entry.key, exc)
        entry.settle(Outcome(error=LoadFailure(entry.key, exc)))

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .entry import EntryState
from .errors import LoadFailure, ResolveTimeout
from .registry import LazyRegistry

T = TypeVar("T")


class PresentationKind(str, Enum):
    BLANK = "blank"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class PresentationOptions:
    """How a host displays a scene that may still be loading.

    - `loading`: placeholder shown while the load is in flight.
    - `error_view`: maps the failure to what the host shows instead of the scene.
    - `delay_s`: nothing is shown for this long, so fast loads never flash the
      placeholder.
    - `timeout_s`: after this long the host gives up and shows the error view;
      the load itself keeps running.
    """

    loading: Any = None
    error_view: Callable[[BaseException], Any] | None = None
    delay_s: float = 0.2
    timeout_s: float | None = None


@dataclass(frozen=True)
class Presentation(Generic[T]):
    key: Hashable
    kind: PresentationKind
    value: T | None = None
    error: BaseException | None = None
    placeholder: Any = None


class ScenePresenter(Generic[T]):
    """Turns registry state into one of blank / loading / ready / error."""

    def __init__(
        self,
        registry: LazyRegistry[T],
        options: PresentationOptions | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self.options = options or PresentationOptions()
        self._clock = clock
        self._lock = threading.Lock()
        self._first_requested: dict[Hashable, float] = {}

    def present(self, key: Hashable) -> Presentation[T]:
        """Non-blocking presentation; starts the load if needed."""

        snap = self.registry.peek(key)
        if snap.state is EntryState.READY:
            return Presentation(key=key, kind=PresentationKind.READY, value=snap.value)
        if snap.state is EntryState.FAILED:
            return self._error(key, snap.error)  # type: ignore[arg-type]

        elapsed = self._elapsed(key)
        state = self.registry.prefetch(key)
        if state.settled:
            # Settled synchronously between peek and prefetch.
            return self.present(key)

        timeout = self.options.timeout_s
        if timeout is not None and elapsed >= timeout:
            return self._error(key, ResolveTimeout(key, timeout))
        if elapsed < self.options.delay_s:
            return Presentation(key=key, kind=PresentationKind.BLANK)
        return Presentation(key=key, kind=PresentationKind.LOADING, placeholder=self.options.loading)

    async def apresent(self, key: Hashable) -> Presentation[T]:
        """Wait (up to `timeout_s`) for the scene and present the outcome."""

        try:
            value = await self.registry.aresolve(key, timeout=self.options.timeout_s)
        except (LoadFailure, ResolveTimeout) as exc:
            return self._error(key, exc)
        return Presentation(key=key, kind=PresentationKind.READY, value=value)

    def _elapsed(self, key: Hashable) -> float:
        now = self._clock()
        with self._lock:
            started = self._first_requested.setdefault(key, now)
        return now - started

    def _error(self, key: Hashable, exc: BaseException) -> Presentation[T]:
        view = self.options.error_view
        return Presentation(
            key=key,
            kind=PresentationKind.ERROR,
            error=exc,
            placeholder=view(exc) if view is not None else None,
        )

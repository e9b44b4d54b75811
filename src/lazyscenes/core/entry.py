"""Per-key load state.

An `Entry` is the single-flight cell behind one registered key: an explicit
state tag plus the list of waiters attached to the in-flight load. All
mutation happens under the entry's own lock; waiters are notified after the
lock is released.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from ..logging_utils import get_logger
from .errors import LoadFailure
from .loaders import Loader

T = TypeVar("T")

logger = get_logger(__name__)


class EntryState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"

    @property
    def settled(self) -> bool:
        return self in (EntryState.READY, EntryState.FAILED)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a finished load: exactly one of `value` / `error` is meaningful."""

    value: T | None = None
    error: LoadFailure | None = None

    def unwrap(self) -> T:
        if self.error is not None:
            # The stored failure is re-raised forever; start each raise from a
            # fresh traceback so frames do not pile up on the shared instance.
            raise self.error.with_traceback(None)
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class EntrySnapshot(Generic[T]):
    key: Hashable
    state: EntryState
    value: T | None
    error: LoadFailure | None
    waiters: int


class Waiter(Protocol):
    def notify(self, outcome: Outcome[Any]) -> None: ...


class ThreadWaiter:
    """Blocks a thread until the in-flight load settles."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.outcome: Outcome[Any] | None = None

    def notify(self, outcome: Outcome[Any]) -> None:
        self.outcome = outcome
        self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


class AsyncWaiter:
    """Resumes a coroutine on its own loop, whichever thread settles the load."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self.future: asyncio.Future[Outcome[Any]] = loop.create_future()

    def notify(self, outcome: Outcome[Any]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._deliver, outcome)
        except RuntimeError:
            # The waiter's loop shut down while it was suspended.
            logger.debug("Dropping outcome for a waiter whose loop is closed")

    def _deliver(self, outcome: Outcome[Any]) -> None:
        # Cancelled or timed-out waiters already gave up.
        if not self.future.done():
            self.future.set_result(outcome)


@dataclass(eq=False)
class Entry(Generic[T]):
    key: Hashable
    loader: Loader[T]
    state: EntryState = EntryState.UNLOADED
    value: T | None = None
    error: LoadFailure | None = None
    pending_waiters: list[Waiter] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def outcome(self) -> Outcome[T] | None:
        with self._lock:
            return self._outcome_locked()

    def _outcome_locked(self) -> Outcome[T] | None:
        if self.state is EntryState.READY:
            return Outcome(value=self.value)
        if self.state is EntryState.FAILED:
            return Outcome(error=self.error)
        return None

    def join(self, waiter: Waiter | None) -> tuple[Outcome[T] | None, bool]:
        """Attach to this entry in one atomic step.

        Returns `(outcome, claimed)`:
        - settled entry: `(outcome, False)` and the waiter is not attached;
        - unloaded entry: moves to LOADING, attaches the waiter, `(None, True)`;
          the caller now owns starting the single load;
        - loading entry: attaches the waiter, `(None, False)`.
        """

        with self._lock:
            settled = self._outcome_locked()
            if settled is not None:
                return settled, False
            claimed = self.state is EntryState.UNLOADED
            if claimed:
                self.state = EntryState.LOADING
            if waiter is not None:
                self.pending_waiters.append(waiter)
        if claimed:
            logger.debug("Scene %r: unloaded -> loading", self.key)
        return None, claimed

    def detach(self, waiter: Waiter) -> None:
        with self._lock:
            if waiter in self.pending_waiters:
                self.pending_waiters.remove(waiter)

    def settle(self, outcome: Outcome[T]) -> None:
        with self._lock:
            if self.state is not EntryState.LOADING:
                raise RuntimeError(f"Scene {self.key!r} cannot settle from state {self.state.value}")
            if outcome.error is not None:
                self.error = outcome.error
                self.state = EntryState.FAILED
            else:
                self.value = outcome.value
                self.state = EntryState.READY
            waiters, self.pending_waiters = self.pending_waiters, []
            new_state = self.state

        logger.debug("Scene %r: loading -> %s (%d waiter(s))", self.key, new_state.value, len(waiters))
        for waiter in waiters:
            waiter.notify(outcome)

    def snapshot(self) -> EntrySnapshot[T]:
        with self._lock:
            return EntrySnapshot(
                key=self.key,
                state=self.state,
                value=self.value,
                error=self.error,
                waiters=len(self.pending_waiters),
            )

from __future__ import annotations

import asyncio
import threading

import pytest

from lazyscenes.core import EntryState, LazyRegistry, LoadFailure, ResolveTimeout, UnknownKeyError


async def _released(gate: threading.Event) -> None:
    # Loaders run on a registry thread with their own loop; poll a thread event.
    while not gate.is_set():
        await asyncio.sleep(0.005)


async def _wait_for_waiters(reg: LazyRegistry, key: str, n: int) -> None:
    for _ in range(500):
        if reg.peek(key).waiters >= n:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"expected {n} waiter(s) on {key!r}")


@pytest.mark.asyncio
async def test_concurrent_aresolves_share_a_single_load() -> None:
    calls: list[int] = []

    async def loader() -> object:
        calls.append(1)
        await asyncio.sleep(0.05)
        return object()

    with LazyRegistry({"a": loader}) as reg:
        results = await asyncio.gather(*(reg.aresolve("a") for _ in range(20)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)
        assert reg.state("a") is EntryState.READY


@pytest.mark.asyncio
async def test_failure_is_shared_and_persistent() -> None:
    calls: list[int] = []

    async def loader() -> object:
        calls.append(1)
        await asyncio.sleep(0.01)
        raise KeyError("no such asset")

    with LazyRegistry({"a": loader}) as reg:
        results = await asyncio.gather(*(reg.aresolve("a") for _ in range(5)), return_exceptions=True)
        assert all(isinstance(r, LoadFailure) for r in results)
        assert all(r is results[0] for r in results)

        with pytest.raises(LoadFailure) as later:
            await reg.aresolve("a")
        assert later.value is results[0]
        assert isinstance(later.value.cause, KeyError)
        assert len(calls) == 1


@pytest.mark.asyncio
async def test_unknown_key_raises() -> None:
    with LazyRegistry() as reg:
        with pytest.raises(UnknownKeyError):
            await reg.aresolve("missing")


@pytest.mark.asyncio
async def test_caller_suspends_then_resumes_with_the_value() -> None:
    value = object()
    gate = threading.Event()
    calls: list[int] = []

    async def loader_a() -> object:
        calls.append(1)
        await _released(gate)
        return value

    async def loader_b() -> object:
        raise AssertionError("b must stay unloaded")

    with LazyRegistry({"a": loader_a, "b": loader_b}) as reg:
        task = asyncio.create_task(reg.aresolve("a"))
        await _wait_for_waiters(reg, "a", 1)

        assert not task.done()
        assert reg.state("a") is EntryState.LOADING

        gate.set()
        assert await task is value

        # Cached: no suspension, no new load.
        assert await reg.aresolve("a") is value
        assert reg.resolve("a") is value
        assert len(calls) == 1
        assert reg.state("b") is EntryState.UNLOADED


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_the_load() -> None:
    gate = threading.Event()
    calls: list[int] = []

    async def loader() -> str:
        calls.append(1)
        await _released(gate)
        return "v"

    with LazyRegistry({"a": loader}) as reg:
        first = asyncio.create_task(reg.aresolve("a"))
        await _wait_for_waiters(reg, "a", 1)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        assert reg.peek("a").waiters == 0
        assert reg.state("a") is EntryState.LOADING

        gate.set()
        assert await reg.aresolve("a") == "v"
        assert len(calls) == 1


@pytest.mark.asyncio
async def test_timed_out_waiter_leaves_the_load_running() -> None:
    gate = threading.Event()

    async def loader() -> str:
        await _released(gate)
        return "v"

    with LazyRegistry({"a": loader}) as reg:
        with pytest.raises(ResolveTimeout):
            await reg.aresolve("a", timeout=0.02)
        assert reg.state("a") is EntryState.LOADING

        gate.set()
        assert await reg.aresolve("a", timeout=5) == "v"


@pytest.mark.asyncio
async def test_sync_loader_does_not_block_the_event_loop() -> None:
    release = threading.Event()

    def loader() -> str:
        assert release.wait(5)
        return threading.current_thread().name

    with LazyRegistry({"a": loader}) as reg:
        task = asyncio.create_task(reg.aresolve("a"))
        await _wait_for_waiters(reg, "a", 1)

        # The loop is still free to run other work while the loader blocks.
        await asyncio.sleep(0.01)
        assert not task.done()

        release.set()
        name = await task
        assert str(name).startswith("lazyscenes-load")


@pytest.mark.asyncio
async def test_thread_and_task_callers_share_one_load() -> None:
    gate = threading.Event()
    calls: list[int] = []

    async def loader() -> object:
        calls.append(1)
        await _released(gate)
        return object()

    with LazyRegistry({"a": loader}) as reg:
        task = asyncio.create_task(reg.aresolve("a"))
        await _wait_for_waiters(reg, "a", 1)

        loop = asyncio.get_running_loop()
        from_thread = loop.run_in_executor(None, lambda: reg.resolve("a", timeout=5))
        await _wait_for_waiters(reg, "a", 2)

        gate.set()
        value = await task
        assert await from_thread is value
        assert len(calls) == 1


@pytest.mark.asyncio
async def test_blocking_resolve_inside_event_loop_is_refused() -> None:
    with LazyRegistry({"a": lambda: "v"}) as reg:
        with pytest.raises(RuntimeError):
            reg.resolve("a")
        # Nothing was started by the refused call.
        assert reg.state("a") is EntryState.UNLOADED

        assert await reg.aresolve("a") == "v"
        # Once cached, the blocking call is fine even on the loop thread.
        assert reg.resolve("a") == "v"


def test_async_loader_runs_on_a_registry_thread() -> None:
    async def loader() -> str:
        await asyncio.sleep(0)
        return threading.current_thread().name

    with LazyRegistry({"a": loader}) as reg:
        name = asyncio.run(reg.aresolve("a", timeout=5))
        assert name.startswith("lazyscenes-load")


def test_load_outlives_the_loop_that_abandoned_it() -> None:
    calls: list[int] = []

    async def loader() -> str:
        calls.append(1)
        await asyncio.sleep(0.2)
        return "v"

    with LazyRegistry({"a": loader}) as reg:
        with pytest.raises(ResolveTimeout):
            asyncio.run(reg.aresolve("a", timeout=0.01))

        # The caller's loop is closed; the load still finishes and is cached.
        assert reg.resolve("a", timeout=5) == "v"
        assert reg.state("a") is EntryState.READY
        assert asyncio.run(reg.aresolve("a")) == "v"
        assert len(calls) == 1


def test_thread_waiter_gets_the_value_after_another_loop_gives_up() -> None:
    gate = threading.Event()

    async def loader() -> str:
        await _released(gate)
        return "v"

    with LazyRegistry({"a": loader}) as reg:
        with pytest.raises(ResolveTimeout):
            asyncio.run(reg.aresolve("a", timeout=0.01))
        assert reg.state("a") is EntryState.LOADING

        results: list[object] = []
        t = threading.Thread(target=lambda: results.append(reg.resolve("a", timeout=5)))
        t.start()
        gate.set()
        t.join(5)

        assert results == ["v"]
        assert reg.peek("a").error is None

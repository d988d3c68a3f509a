import asyncio
import threading

import pytest

from spanbridge.runtime import block_on, get_runtime, spawn


async def _value(v):
    await asyncio.sleep(0)
    return v


async def _fail():
    await asyncio.sleep(0)
    raise ValueError("boom")


async def _thread_id():
    return threading.get_ident()


def test_get_runtime_is_shared_and_running():
    first = get_runtime()
    second = get_runtime()
    assert first is second
    assert first.is_running()


def test_block_on_returns_result():
    assert block_on(_value(42)) == 42


def test_block_on_propagates_exception():
    with pytest.raises(ValueError, match="boom"):
        block_on(_fail())


def test_spawn_returns_future_with_result():
    future = spawn(_value("done"))
    assert future.result(timeout=5) == "done"


def test_spawn_propagates_exception_through_future():
    future = spawn(_fail())
    with pytest.raises(ValueError, match="boom"):
        future.result(timeout=5)


def test_coroutines_run_on_one_background_thread():
    a = block_on(_thread_id())
    b = spawn(_thread_id()).result(timeout=5)
    assert a == b
    assert a != threading.get_ident()


def test_spawned_task_and_block_on_share_loop():
    async def make_event():
        return asyncio.Event()

    event = block_on(make_event())

    async def waiter():
        await event.wait()
        return "released"

    async def release():
        event.set()
        return True

    future = spawn(waiter())
    assert block_on(release()) is True
    assert future.result(timeout=5) == "released"


def test_nested_block_on_is_rejected():
    async def outer():
        return block_on(_value(1))

    with pytest.raises(RuntimeError, match="own thread"):
        block_on(outer())
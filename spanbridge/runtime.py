"""A shared background event loop for driving asynchronous Spanner calls."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

_lock = threading.Lock()
_loop: asyncio.AbstractEventLoop | None = None


class RuntimeStartError(RuntimeError):
    """Raised when the background event loop cannot be started."""


def _start_loop() -> asyncio.AbstractEventLoop:
    try:
        loop = asyncio.new_event_loop()
    except OSError as exc:
        raise RuntimeStartError(f"Failed to create event loop: {exc}") from exc

    ready = threading.Event()

    def run() -> None:
        asyncio.set_event_loop(loop)
        loop.call_soon(ready.set)
        loop.run_forever()

    thread = threading.Thread(target=run, name="spanbridge-runtime", daemon=True)
    try:
        thread.start()
    except RuntimeError as exc:
        loop.close()
        raise RuntimeStartError(f"Failed to start runtime thread: {exc}") from exc
    ready.wait()
    return loop


def get_runtime() -> asyncio.AbstractEventLoop:
    """Return the process-wide event loop, starting it on first use."""
    global _loop
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = _start_loop()
        return _loop


def _in_runtime_thread(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


def block_on(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` on the shared loop and wait for its result."""
    loop = get_runtime()
    if _in_runtime_thread(loop):
        coro.close()
        raise RuntimeError("block_on cannot be called from the runtime's own thread")
    return asyncio.run_coroutine_threadsafe(coro, loop).result()


def spawn(coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
    """Schedule ``coro`` on the shared loop without waiting for it."""
    return asyncio.run_coroutine_threadsafe(coro, get_runtime())
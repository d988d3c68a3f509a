"""Streaming of query results from a background producer to a blocking consumer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from spanbridge.runtime import block_on, get_runtime, spawn

logger = logging.getLogger(__name__)

BATCH_SIZE = 2048


class StreamError(Exception):
    """Raised on the consumer side when the producer reported a failure."""


@dataclass(frozen=True)
class _Failure:
    error: BaseException


_END = object()


class RowChannel:
    """A bounded channel carrying rows from a producer on the shared loop.

    The producer side (``send``, ``fail``, ``close``) consists of coroutines
    run on the runtime loop; the consumer side (``next_batch``, iteration)
    blocks the calling thread.
    """

    def __init__(self, capacity: int = BATCH_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._discarded = False
        self._finished = False

    async def send(self, row: Any) -> bool:
        """Queue a row, waiting for room; return False once the consumer has gone."""
        if self._discarded:
            return False
        if self._closed:
            raise StreamError("send on a closed channel")
        await self._queue.put(row)
        return not self._discarded

    async def fail(self, error: BaseException) -> None:
        """Report an error to the consumer and end the stream."""
        if self._discarded:
            return
        if self._closed:
            raise StreamError("fail on a closed channel")
        await self._queue.put(_Failure(error))
        await self.close()

    async def close(self) -> None:
        """End the stream; closing twice has no further effect."""
        if self._closed or self._discarded:
            return
        self._closed = True
        await self._queue.put(_END)

    def next_batch(self) -> list[Any]:
        """Block for at least one row, then take what is ready, up to ``capacity``.

        Returns an empty list once the stream has ended.
        """
        if self._finished or self._discarded:
            return []
        return block_on(self._collect())

    def __iter__(self) -> Iterator[Any]:
        try:
            while batch := self.next_batch():
                yield from batch
        finally:
            if not self._finished:
                self._discard()

    async def _collect(self) -> list[Any]:
        item = await self._queue.get()
        batch: list[Any] = []
        while True:
            if item is _END:
                self._finished = True
                break
            if isinstance(item, _Failure):
                self._finished = True
                raise StreamError(str(item.error)) from item.error
            batch.append(item)
            if len(batch) >= self.capacity:
                break
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
        return batch

    def _discard(self) -> None:
        get_runtime().call_soon_threadsafe(self._discard_now)

    def _discard_now(self) -> None:
        self._discarded = True
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break


Producer = Callable[[RowChannel], Awaitable[None]]


def start_stream(
    single: Producer,
    partitioned: Producer | None,
    use_parallelism: bool,
) -> RowChannel:
    """Start producing rows in the background and return the channel to read them from.

    With ``use_parallelism`` the partitioned producer runs first; if it fails,
    the failure is logged and the single producer runs instead. Any other
    failure reaches the consumer as a :class:`StreamError`.
    """
    channel = RowChannel(BATCH_SIZE)

    async def produce() -> None:
        try:
            if use_parallelism and partitioned is not None:
                try:
                    await partitioned(channel)
                    return
                except Exception as exc:
                    logger.warning(
                        "Partitioned query failed: %s, falling back to single query", exc
                    )
            await single(channel)
        except Exception as exc:
            await channel.fail(exc)
        finally:
            await channel.close()

    spawn(produce())
    return channel
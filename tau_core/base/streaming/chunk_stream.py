"""Consumer-facing handle for one streaming execution.

``ChunkStream`` is an async iterator over ``StreamingChunk``. It is fed by
exactly one decode worker through a bounded ``asyncio.Queue``; iteration ends
once the worker has exited and the queue is drained, so the consumer always
observes end-of-stream even when no terminal marker arrived.

Callers must check ``chunk.error`` on each chunk: a mid-stream failure is
delivered as a final chunk carrying the error.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator, List, Optional

import httpx

from ...response import StreamingChunk
from ..cancellation import CancellationToken
from ..logging import LogContext
from .event_stream import ExitHook, run_decode_worker
from .metrics import StreamMetrics


class ChunkStream:
    """Async iterator of chunks with cancellation and cleanup.

    Usage::

        async with await client.execute_stream(request) as stream:
            async for chunk in stream:
                if chunk.error:
                    raise chunk.error
                print(chunk.content(), end="")
    """

    def __init__(
        self,
        queue: "asyncio.Queue[StreamingChunk]",
        worker: "asyncio.Task[Optional[BaseException]]",
        token: CancellationToken,
        metrics: StreamMetrics,
    ) -> None:
        self._queue = queue
        self._worker = worker
        self._token = token
        self._metrics = metrics
        self._error: Optional[BaseException] = None

    @classmethod
    def start(
        cls,
        decoder: AsyncIterator[StreamingChunk],
        response: httpx.Response,
        token: CancellationToken,
        *,
        buffer_size: int = 1,
        metrics: Optional[StreamMetrics] = None,
        ctx: LogContext | None = None,
        on_exit: Optional[ExitHook] = None,
    ) -> "ChunkStream":
        """Spawn the decode worker for ``response`` and return the consumer handle."""
        queue: "asyncio.Queue[StreamingChunk]" = asyncio.Queue(maxsize=max(1, buffer_size))
        metrics = metrics if metrics is not None else StreamMetrics()
        worker = asyncio.get_running_loop().create_task(
            run_decode_worker(decoder, response, queue, token, metrics, ctx, on_exit)
        )
        return cls(queue, worker, token, metrics)

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> StreamingChunk:
        chunk = await self._next()
        if chunk is None:
            raise StopAsyncIteration
        if chunk.error is not None:
            self._error = chunk.error
        return chunk

    async def _next(self) -> Optional[StreamingChunk]:
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._worker.done():
            return None
        getter = asyncio.ensure_future(self._queue.get())
        try:
            await asyncio.wait({getter, self._worker}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not getter.done():
                getter.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await getter
        if getter.done() and not getter.cancelled():
            return getter.result()
        # worker exited; anything it managed to enqueue is still ours
        if not self._queue.empty():
            return self._queue.get_nowait()
        return None

    def cancel(self, reason: str | None = None) -> None:
        """Stop the stream; the worker closes the body and iteration ends."""
        self._token.cancel(reason or "stream cancelled")

    async def aclose(self) -> None:
        """Cancel (if still running) and wait for the worker to release the body."""
        if not self._worker.done():
            self.cancel("stream closed")
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker

    async def __aenter__(self) -> "ChunkStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def collect_content(self) -> str:
        """Drain the stream and join chunk contents.

        Raises the error of an error chunk when one is delivered.
        """
        parts: List[str] = []
        async for chunk in self:
            if chunk.error is not None:
                raise chunk.error
            parts.append(chunk.content())
        return "".join(parts)

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the worker exited and every delivered chunk was consumed."""
        return self._worker.done() and self._queue.empty()

    @property
    def error(self) -> Optional[BaseException]:  # noqa: D401 - short property
        """Error carried by the terminal chunk, once it has been consumed."""
        return self._error

    @property
    def metrics(self) -> StreamMetrics:
        return self._metrics

    @property
    def token(self) -> CancellationToken:
        return self._token


__all__ = ["ChunkStream"]

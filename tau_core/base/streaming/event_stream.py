"""Server-sent-event decoding and the per-stream decode worker.

``iter_stream_chunks`` turns a live ``httpx.Response`` body into
``StreamingChunk`` objects. Providers decide per line whether it carries a
payload, should be skipped, or terminates the stream (``stream_payload``).

``run_decode_worker`` is the single task that drains such a decoder into the
bounded queue read by :class:`~tau_core.base.streaming.chunk_stream.ChunkStream`.
Every delivery races the stream's cancellation token and the response body
is closed exactly once when the worker exits, whatever the exit path.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Callable, Optional, Union

import httpx

from ...response import ResponseDecodeError, StreamingChunk, parse_stream_chunk
from ..cancellation import CancellationToken, CancelledError, run_cancellable
from ..errors import ErrorCode, ProviderError, classify_exception
from ..logging import LogContext, get_logger, normalized_log_event
from ..protocol import Protocol
from .metrics import StreamMetrics


class _EndOfStream:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return "END_OF_STREAM"


END_OF_STREAM = _EndOfStream()
"""Returned by ``stream_payload`` when a line terminates the stream."""

DATA_PREFIX = "data:"

LinePayload = Union[str, _EndOfStream, None]
PayloadFn = Callable[[str], LinePayload]
ExitHook = Callable[[Optional[BaseException]], None]

_logger = get_logger("tau_core.stream")


def strip_data_prefix(line: str) -> Optional[str]:
    """Return the payload of an SSE ``data:`` line, ``None`` for other lines."""
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].lstrip()


async def iter_stream_chunks(
    response: httpx.Response,
    protocol: Protocol,
    stream_payload: PayloadFn,
    *,
    provider: str,
    model: Optional[str] = None,
    metrics: Optional[StreamMetrics] = None,
) -> AsyncIterator[StreamingChunk]:
    """Decode ``response`` line by line into chunks.

    Blank lines and lines ``stream_payload`` maps to ``None`` are skipped;
    malformed payloads are skipped and counted. A read failure yields one
    final chunk carrying a ``ProviderError`` and ends the iteration.
    """
    try:
        async for raw_line in response.aiter_lines():
            line = raw_line.strip()
            if not line:
                continue
            payload = stream_payload(line)
            if payload is END_OF_STREAM:
                return
            if payload is None:
                continue
            try:
                chunk = parse_stream_chunk(protocol, payload)
            except ResponseDecodeError as exc:
                if metrics is not None:
                    metrics.record_skip()
                _logger.debug("skipping malformed stream payload: %s", exc)
                continue
            yield chunk
    except (httpx.HTTPError, OSError) as exc:
        error = ProviderError(
            code=classify_exception(exc),
            message=f"stream read failed: {exc}",
            provider=provider,
            model=model,
            raw=exc,
            phase="stream",
        )
        error.__cause__ = exc
        yield StreamingChunk.from_error(error)


async def deliver(queue: "asyncio.Queue[StreamingChunk]", item: StreamingChunk, token: CancellationToken) -> bool:
    """Put ``item`` on ``queue`` unless ``token`` fires first.

    Returns ``False`` when cancellation won; the item is then dropped.
    """
    if token.cancelled:
        return False
    if not queue.full():
        queue.put_nowait(item)
        return True
    try:
        await run_cancellable(queue.put(item), token)
    except CancelledError:
        return False
    return True


async def run_decode_worker(
    decoder: AsyncIterator[StreamingChunk],
    response: httpx.Response,
    queue: "asyncio.Queue[StreamingChunk]",
    token: CancellationToken,
    metrics: StreamMetrics,
    ctx: LogContext | None = None,
    on_exit: Optional[ExitHook] = None,
) -> Optional[BaseException]:
    """Drain ``decoder`` into ``queue`` until exhaustion, error or cancellation.

    Returns the error delivered to the consumer (if any). The response body
    and the decoder are closed on every exit path, ``token`` is detached from
    its parent and ``on_exit`` receives the delivered error (or ``None``).
    """
    error: Optional[BaseException] = None
    cancelled = False
    iterator = decoder.__aiter__()
    try:
        while True:
            try:
                chunk = await run_cancellable(_next_chunk(iterator), token)
            except CancelledError:
                cancelled = True
                break
            except Exception as exc:  # noqa: BLE001 - surfaced to the consumer as an error chunk
                chunk = StreamingChunk.from_error(
                    ProviderError(
                        code=classify_exception(exc),
                        message=f"stream decode failed: {exc}",
                        provider=ctx.provider if ctx and ctx.provider else "-",
                        model=ctx.model if ctx else None,
                        raw=exc,
                        phase="stream",
                    )
                )
            if chunk is None:
                break
            if not await deliver(queue, chunk, token):
                cancelled = True
                break
            metrics.record_emit()
            if chunk.error is not None:
                error = chunk.error
                break
    finally:
        with contextlib.suppress(Exception):
            await _aclose(iterator)
        token.detach()
        await response.aclose()
        metrics.finish()
        _log_exit(ctx, metrics, error=error, cancelled=cancelled, reason=token.reason)
        if on_exit is not None:
            on_exit(error)
    return error


async def _next_chunk(iterator: AsyncIterator[StreamingChunk]) -> Optional[StreamingChunk]:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None


async def _aclose(iterator: AsyncIterator[StreamingChunk]) -> None:
    closer = getattr(iterator, "aclose", None)
    if closer is not None:
        await closer()


def _log_exit(
    ctx: LogContext | None,
    metrics: StreamMetrics,
    *,
    error: Optional[BaseException],
    cancelled: bool,
    reason: Optional[str],
) -> None:
    if cancelled:
        normalized_log_event(
            _logger,
            "stream.cancelled",
            ctx,
            phase="stream",
            error_code=ErrorCode.CANCELLED.value,
            emitted=metrics.emitted > 0,
            reason=reason,
        )
    elif error is not None:
        normalized_log_event(
            _logger,
            "stream.error",
            ctx,
            phase="stream",
            error_code=classify_exception(error).value,
            emitted=metrics.emitted > 0,
            level=logging.WARNING,
            error=str(error),
        )
    normalized_log_event(
        _logger,
        "stream.end",
        ctx,
        phase="finalize",
        emitted=metrics.emitted > 0,
        metrics=metrics.to_dict(),
    )


__all__ = [
    "DATA_PREFIX",
    "END_OF_STREAM",
    "ExitHook",
    "LinePayload",
    "PayloadFn",
    "deliver",
    "iter_stream_chunks",
    "run_decode_worker",
    "strip_data_prefix",
]

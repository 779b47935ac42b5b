"""Execution client.

Purpose:
        Take a protocol-typed request, ask its provider to marshal and prepare
        it, perform the HTTP call and decode the result. Atomic executions go
        through the retry policy; streaming executions make exactly one HTTP
        attempt and hand back a :class:`ChunkStream`.

Error handling:
        Failures are wrapped in ``ProviderError`` tagged with the phase they
        happened in (``marshal``, ``prepare``, ``send``, ``decode``); the
        original exception stays chained so the retry classifier can unwrap
        it. Non-2xx responses become ``HTTPStatusError`` carrying the body.

Health:
        ``is_healthy`` reports the outcome of the most recent attempt
        (last write wins); a stream reports once its worker has exited.
        The flag is guarded by a ``threading.Lock`` so it may also be read
        from other threads.

Resources:
        One ``httpx.AsyncClient`` per execution client, created lazily and
        released by ``aclose`` (or ``async with``).
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
import uuid
from typing import Any, Iterator, Optional

import httpx

from ..base.cancellation import CancellationToken, CancelledError, run_cancellable
from ..base.errors import ErrorCode, ProviderError, StreamingNotSupportedError, classify_exception
from ..base.http import build_async_client
from ..base.interfaces import Request
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.resilience.retry import do_with_retry, is_retryable_error
from ..base.streaming import ChunkStream, StreamMetrics
from ..config import ClientConfig
from ..providers.base import status_error

_logger = get_logger("tau_core.client")


@contextlib.contextmanager
def _phase(phase: str, provider: str, model: Optional[str]) -> Iterator[None]:
    """Tag errors raised inside the block with ``phase``.

    ``ProviderError`` instances keep their identity (missing phase/model are
    filled in); anything else is wrapped with the original chained as cause.
    Cancellation passes through untouched.
    """
    try:
        yield
    except ProviderError as exc:
        if exc.phase is None:
            exc.phase = phase
        if exc.model is None:
            exc.model = model
        raise
    except CancelledError:
        raise
    except Exception as exc:
        raise ProviderError(
            code=classify_exception(exc),
            message=f"{phase} failed: {exc}",
            provider=provider,
            model=model,
            retryable=is_retryable_error(exc),
            raw=exc,
            phase=phase,
        ) from exc


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000.0, 3)


class ExecutionClient:
    """Execute requests against their providers with retry and streaming support."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config if config is not None else ClientConfig()
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self._healthy = True
        self._health_lock = threading.Lock()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def http_client(self) -> httpx.AsyncClient:
        """The pooled ``httpx.AsyncClient`` (created on first use)."""
        if self._http is None or self._http.is_closed:
            self._http = build_async_client(self._config, self._transport)
        return self._http

    # -- health -----------------------------------------------------------------
    def is_healthy(self) -> bool:
        with self._health_lock:
            return self._healthy

    def _set_healthy(self, value: bool) -> None:
        with self._health_lock:
            self._healthy = value

    # -- atomic execution -------------------------------------------------------
    async def execute(self, request: Request, token: Optional[CancellationToken] = None) -> Any:
        """Execute ``request`` and return the decoded response.

        Raises:
            CancelledError: ``token`` was cancelled (or its deadline passed).
            RetryExhaustedError: every attempt failed transiently.
            ProviderError: the first permanent failure (``HTTPStatusError`` for
                refused requests).
        """
        ctx = self._context(request)
        start = time.perf_counter()
        normalized_log_event(_logger, "execute.start", ctx, phase="start")
        try:
            result = await do_with_retry(
                lambda: self._attempt(request),
                self._config.retry,
                token,
                ctx=ctx,
            )
        except Exception as exc:
            normalized_log_event(
                _logger,
                "execute.error",
                ctx,
                phase="finalize",
                error_code=classify_exception(exc).value,
                level=logging.WARNING,
                error=str(exc),
                duration_ms=_elapsed_ms(start),
            )
            raise
        normalized_log_event(
            _logger,
            "execute.success",
            ctx,
            phase="finalize",
            tokens=getattr(result, "usage", None),
            duration_ms=_elapsed_ms(start),
        )
        return result

    async def _attempt(self, request: Request) -> Any:
        try:
            result = await self._send_once(request)
        except Exception:
            self._set_healthy(False)
            raise
        self._set_healthy(True)
        return result

    async def _send_once(self, request: Request) -> Any:
        protocol = request.protocol
        provider = request.provider
        model = request.model.name

        with _phase("marshal", provider.name, model):
            body = request.marshal()
        with _phase("prepare", provider.name, model):
            prepared = provider.prepare_request(protocol, body, request.headers())
            http_request = self.http_client.build_request(
                "POST", prepared.url, headers=prepared.headers, content=prepared.body
            )
            provider.set_headers(http_request)
        with _phase("send", provider.name, model):
            response = await self.http_client.send(http_request)
        if not response.is_success:
            raise status_error(provider.name, response, response.content, model=model)
        with _phase("decode", provider.name, model):
            return await provider.process_response(response, protocol)

    # -- streaming execution ----------------------------------------------------
    async def execute_stream(self, request: Request, token: Optional[CancellationToken] = None) -> ChunkStream:
        """Start a streaming execution and return its chunk stream.

        Exactly one HTTP attempt is made; streams are never retried. Setup
        failures (unsupported protocol, marshal/prepare errors, transport
        errors, non-2xx) raise before any chunk is delivered. The returned
        stream owns a child of ``token``: cancelling ``token`` stops it, while
        ``ChunkStream.cancel`` leaves ``token`` untouched.
        """
        protocol = request.protocol
        provider = request.provider
        model = request.model.name
        if not protocol.supports_streaming():
            raise StreamingNotSupportedError(
                code=ErrorCode.UNSUPPORTED,
                message=f"protocol {protocol.value} does not support streaming",
                provider=provider.name,
                model=model,
                phase="prepare",
            )
        if token is not None:
            token.raise_if_cancelled()
        stream_token = token.child() if token is not None else CancellationToken()
        ctx = self._context(request)

        try:
            response = await self._open_stream(request, stream_token)
        except Exception as exc:
            stream_token.detach()
            self._set_healthy(False)
            normalized_log_event(
                _logger,
                "stream.error",
                ctx,
                phase="start",
                error_code=classify_exception(exc).value,
                emitted=False,
                level=logging.WARNING,
                error=str(exc),
            )
            raise

        metrics = StreamMetrics()
        decoder = provider.process_stream_response(response, protocol, metrics)
        normalized_log_event(_logger, "stream.start", ctx, phase="start", emitted=False)
        return ChunkStream.start(
            decoder,
            response,
            stream_token,
            buffer_size=self._config.stream_buffer_size,
            metrics=metrics,
            ctx=ctx,
            on_exit=self._stream_finished,
        )

    def _stream_finished(self, error: Optional[BaseException]) -> None:
        self._set_healthy(error is None)

    async def _open_stream(self, request: Request, token: CancellationToken) -> httpx.Response:
        protocol = request.protocol
        provider = request.provider
        model = request.model.name

        with _phase("marshal", provider.name, model):
            body = request.marshal()
        with _phase("prepare", provider.name, model):
            prepared = provider.prepare_stream_request(protocol, body, request.headers())
            http_request = self.http_client.build_request(
                "POST", prepared.url, headers=prepared.headers, content=prepared.body
            )
            provider.set_headers(http_request)
        with _phase("send", provider.name, model):
            response = await run_cancellable(self.http_client.send(http_request, stream=True), token)
        if response.is_success:
            return response
        error_body = b""
        try:
            error_body = await response.aread()
        except httpx.HTTPError as exc:
            _logger.debug("could not read error body for HTTP %s: %s", response.status_code, exc)
        finally:
            await response.aclose()
        raise status_error(provider.name, response, error_body, model=model)

    # -- lifecycle --------------------------------------------------------------
    async def aclose(self) -> None:
        """Close the connection pool; a later call re-creates it lazily."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ExecutionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @staticmethod
    def _context(request: Request) -> LogContext:
        return LogContext(
            provider=request.provider.name,
            model=request.model.name,
            protocol=request.protocol.value,
            request_id=uuid.uuid4().hex[:12],
        )


__all__ = ["ExecutionClient"]

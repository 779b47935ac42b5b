"""Retry policy for atomic executions.

Classification unwraps ``__cause__``/``__context__`` (and ``ProviderError.raw``)
down to the root failure. Cancellation anywhere in the chain is final. Server
refusals are retried only for 429, 502, 503 and 504; transport failures
(connection, timeout, temporary DNS) are retried. A permanent DNS failure
anywhere in the chain is final, even under an httpx ``ConnectError``.

Streaming executions never go through this module.
"""
from __future__ import annotations

import asyncio
import random
import socket
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Protocol, TypeVar

import httpx

from ..cancellation import CancellationToken, CancelledError, run_cancellable, sleep_cancellable
from ..errors import HTTPStatusError, RetryExhaustedError, classify_exception, walk_exception_chain
from ..logging import LogContext, get_logger, normalized_log_event

if TYPE_CHECKING:  # pragma: no cover
    from ...config import RetryConfig

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})
MAX_BACKOFF_EXPONENT = 10
JITTER_FRACTION = 0.25

_logger = get_logger("tau_core.retry")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: BaseException | None,
    ) -> None: ...


def _classify_one(exc: BaseException) -> Optional[bool]:
    """Verdict for a single exception in the chain, ``None`` when undecided."""
    if isinstance(exc, HTTPStatusError):
        return exc.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    return None


def _is_temporary_dns_failure(exc: socket.gaierror) -> bool:
    eai_again = getattr(socket, "EAI_AGAIN", None)
    return eai_again is not None and exc.errno == eai_again


def is_retryable_error(exc: BaseException) -> bool:
    """Return whether ``exc`` describes a transient failure worth another attempt."""
    chain = list(walk_exception_chain(exc))
    if any(isinstance(cur, (CancelledError, asyncio.CancelledError)) for cur in chain):
        return False
    # name resolution decides even when wrapped by a transport error
    for cur in chain:
        if isinstance(cur, socket.gaierror):
            return _is_temporary_dns_failure(cur)
    for cur in chain:
        verdict = _classify_one(cur)
        if verdict is not None:
            return verdict
    return False


def calculate_backoff(attempt: int, cfg: "RetryConfig") -> float:
    """Delay in seconds to wait after failed attempt number ``attempt`` (0-based).

    ``min(max_backoff, initial_backoff * multiplier ** min(attempt, 10))`` with
    uniform +/-25% jitter applied before the cap when ``cfg.jitter`` is set.
    """
    exponent = min(max(attempt, 0), MAX_BACKOFF_EXPONENT)
    delay = cfg.initial_backoff * (cfg.backoff_multiplier**exponent)
    if cfg.jitter:
        spread = delay * JITTER_FRACTION
        delay += random.uniform(-spread, spread)
    return max(0.0, min(cfg.max_backoff, delay))


async def do_with_retry(
    operation: Callable[[], Awaitable[T]],
    cfg: "RetryConfig",
    token: Optional[CancellationToken] = None,
    *,
    ctx: LogContext | None = None,
    attempt_logger: AttemptLogger | None = None,
) -> T:
    """Run ``operation`` until it succeeds, fails permanently or attempts run out.

    Up to ``cfg.max_retries + 1`` attempts. Cancellation is checked before each
    attempt, aborts the in-flight attempt and interrupts the backoff wait.

    Raises:
        CancelledError: the token fired.
        RetryExhaustedError: every attempt failed transiently; the last error
            is chained as ``__cause__``.
        Exception: the first non-retryable error, unchanged.
    """
    max_attempts = max(0, cfg.max_retries) + 1
    last_exc: BaseException | None = None
    for attempt in range(max_attempts):
        if token is not None:
            token.raise_if_cancelled()
        try:
            result = await run_cancellable(operation(), token)
        except Exception as exc:  # noqa: BLE001 - classified below
            last_exc = exc
            retryable = is_retryable_error(exc)
            has_next = attempt + 1 < max_attempts
            delay = calculate_backoff(attempt, cfg) if retryable and has_next else None
            if attempt_logger:
                attempt_logger(attempt=attempt, max_attempts=max_attempts, delay=delay, error=exc)
            if not retryable:
                raise
            if delay is None:
                break
            normalized_log_event(
                _logger,
                "retry.attempt",
                ctx,
                phase="retry",
                attempt=attempt + 1,
                error_code=classify_exception(exc).value,
                delay_ms=int(delay * 1000),
                max_attempts=max_attempts,
                error=str(exc),
            )
            await sleep_cancellable(delay, token)
            continue
        if attempt_logger:
            attempt_logger(attempt=attempt, max_attempts=max_attempts, delay=None, error=None)
        return result

    if last_exc is None:  # pragma: no cover - max_attempts is always >= 1
        raise RuntimeError("retry: reached terminal state without captured exception")
    provider = getattr(last_exc, "provider", None) or (ctx.provider if ctx else None) or "-"
    model = getattr(last_exc, "model", None) or (ctx.model if ctx else None)
    raise RetryExhaustedError(
        code=classify_exception(last_exc),
        message=str(last_exc),
        provider=provider,
        model=model,
        retryable=False,
        raw=last_exc,
        phase=getattr(last_exc, "phase", None),
        attempts=max_attempts,
    ) from last_exc


__all__ = [
    "AttemptLogger",
    "RETRYABLE_STATUS_CODES",
    "calculate_backoff",
    "do_with_retry",
    "is_retryable_error",
]

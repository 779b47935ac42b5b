"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose provider-agnostic cancellation constructs via the canonical
``tau_core.base.cancellation`` import path while the concrete implementations
live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` signals cancellation across executions, retries and
  stream workers; it may carry a deadline.
- ``run_cancellable`` races an awaitable against a token so blocking awaits
  (HTTP sends, backoff sleeps) return promptly once the token fires.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, Optional, TypeVar

from .cancellation_parts.cancelled_error import CancelledError, DeadlineExceededError
from .cancellation_parts.cancellation_token import CancellationToken

T = TypeVar("T")


async def run_cancellable(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await ``awaitable`` unless ``token`` is cancelled first.

    When the token fires the inner task is cancelled and the token's error
    (``CancelledError`` or ``DeadlineExceededError``) is raised.
    """
    if token is None:
        return await awaitable
    token.raise_if_cancelled()
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise
    if task in done:
        waiter.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await waiter
        return task.result()
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task
    raise token.error()


async def sleep_cancellable(delay: float, token: Optional[CancellationToken]) -> None:
    """Sleep ``delay`` seconds, returning early with the token error on cancellation."""
    if token is None:
        await asyncio.sleep(delay)
        return
    if await token.wait(timeout=delay):
        raise token.error()


__all__ = [
    "CancellationToken",
    "CancelledError",
    "DeadlineExceededError",
    "run_cancellable",
    "sleep_cancellable",
]

"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class used by the execution client, the
retry loop and stream workers. A token may carry a deadline and may be linked
to a parent; cancelling the parent cancels every child. Async callers can
``await token.wait()`` to be woken as soon as cancellation happens, including
when ``cancel`` is called from another thread.
"""

from __future__ import annotations

import asyncio
import time
from threading import Lock
from typing import List, Optional, Tuple

from .cancelled_error import CancelledError, DeadlineExceededError
from .state import State

DEADLINE_REASON = "deadline exceeded"


class CancellationToken:
    """A cooperative cancellation token with optional deadline and cascading.

    Args:
        timeout: Seconds from now after which the token counts as cancelled.
        deadline: Absolute ``time.monotonic()`` value; wins over ``timeout``.
        parent: Token whose cancellation cascades into this one. A child never
            outlives its parent's deadline.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        parent: "CancellationToken | None" = None,
    ) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._waiters: List[Tuple[asyncio.AbstractEventLoop, asyncio.Future]] = []
        if deadline is None and timeout is not None:
            deadline = time.monotonic() + max(0.0, float(timeout))
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._state.deadline = deadline
        self._parent = parent
        if parent is not None:
            parent.link_child(self)

    @property
    def deadline(self) -> Optional[float]:
        """Absolute monotonic deadline, if any."""
        return self._state.deadline

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested or the deadline passed."""
        if self._state.cancelled:
            return True
        if self._state.deadline is not None and time.monotonic() >= self._state.deadline:
            self._expire()
            return True
        return False

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (``None`` without a deadline)."""
        if self._state.deadline is None:
            return None
        return max(0.0, self._state.deadline - time.monotonic())

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, wake waiters and cascade to children."""
        self._cancel(reason, expired=False)

    def _expire(self) -> None:
        self._cancel(DEADLINE_REASON, expired=True)

    def _cancel(self, reason: str | None, *, expired: bool) -> None:
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            self._state.expired = expired
            children = list(self._children)
            waiters = list(self._waiters)
            self._waiters.clear()
        for loop, fut in waiters:
            try:
                loop.call_soon_threadsafe(_resolve, fut)
            except RuntimeError:
                # loop already closed; nobody left to wake
                continue
        for child in children:
            child._cancel(reason, expired=expired)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
            expired = self._state.expired
        if should_cancel:
            token._cancel(reason, expired=expired)
        return token

    def unlink_child(self, token: "CancellationToken") -> None:
        """Forget a linked child; unknown tokens are ignored."""
        with self._lock:
            try:
                self._children.remove(token)
            except ValueError:
                pass

    def detach(self) -> None:
        """Unlink from the parent once this token is no longer in use.

        A detached token keeps its own state but no longer receives the
        parent's cancellation.
        """
        parent, self._parent = self._parent, None
        if parent is not None:
            parent.unlink_child(self)

    @property
    def children(self) -> Tuple["CancellationToken", ...]:
        """Snapshot of the currently linked children."""
        with self._lock:
            return tuple(self._children)

    def child(self, *, timeout: Optional[float] = None) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(timeout=timeout, parent=self)

    def error(self) -> CancelledError:
        """Build the exception describing this token's cancellation."""
        if self._state.expired:
            return DeadlineExceededError(self._state.reason or DEADLINE_REASON)
        return CancelledError(self._state.reason or "operation cancelled")

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` (or ``DeadlineExceededError``) if cancelled."""
        if self.cancelled:
            raise self.error()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until the token is cancelled.

        Returns ``True`` once cancelled, ``False`` if ``timeout`` elapsed first.
        The token deadline is honored even when ``timeout`` is ``None``.
        """
        if self.cancelled:
            return True
        loop = asyncio.get_running_loop()
        fut: asyncio.Future = loop.create_future()
        with self._lock:
            if self._state.cancelled:
                return True
            self._waiters.append((loop, fut))
        limit = self.remaining()
        if timeout is not None:
            limit = timeout if limit is None else min(limit, timeout)
        try:
            await asyncio.wait_for(asyncio.shield(fut), timeout=limit)
            return True
        except asyncio.TimeoutError:
            return self.cancelled
        finally:
            with self._lock:
                try:
                    self._waiters.remove((loop, fut))
                except ValueError:
                    pass
            if not fut.done():
                fut.cancel()

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, deadline={self._state.deadline!r}, "
            f"children={len(self._children)})"
        )


def _resolve(fut: asyncio.Future) -> None:
    if not fut.done():
        fut.set_result(True)


__all__ = ["CancellationToken", "DEADLINE_REASON"]

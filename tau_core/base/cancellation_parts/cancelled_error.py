"""Cancellation error types.

``CancelledError`` signals cooperative cancellation of an execution or stream.
``DeadlineExceededError`` is the specialization raised when a token's
deadline passed rather than someone calling ``cancel``.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinguishes cooperative cancellation from other runtime failures so the
    retry policy never retries it and logging can report it as ``cancelled``.
    """


class DeadlineExceededError(CancelledError):
    """Raised when the token deadline elapsed before the operation finished."""


__all__ = ["CancelledError", "DeadlineExceededError"]

"""Cancellation parts: token state, error types and the token itself."""

from .cancelled_error import CancelledError, DeadlineExceededError
from .cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError", "DeadlineExceededError"]

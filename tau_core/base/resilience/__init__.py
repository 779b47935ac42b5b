"""Resilience helpers: retry classification, backoff and the retry loop."""

from .retry import AttemptLogger, calculate_backoff, do_with_retry, is_retryable_error

__all__ = ["AttemptLogger", "calculate_backoff", "do_with_retry", "is_retryable_error"]

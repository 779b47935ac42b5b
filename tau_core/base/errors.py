"""Unified provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``tau_core.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import (
    HTTPStatusError,
    MarshalError,
    ProviderConfigError,
    ProviderError,
    RetryExhaustedError,
    StreamingNotSupportedError,
    UnsupportedProtocolError,
)
from .errors_parts.classification import classify_exception, status_to_code, walk_exception_chain

__all__ = [
    "ErrorCode",
    "ProviderError",
    "HTTPStatusError",
    "RetryExhaustedError",
    "MarshalError",
    "UnsupportedProtocolError",
    "StreamingNotSupportedError",
    "ProviderConfigError",
    "classify_exception",
    "status_to_code",
    "walk_exception_chain",
]

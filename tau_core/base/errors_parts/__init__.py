"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `tau_core.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import (
    HTTPStatusError,
    MarshalError,
    ProviderConfigError,
    ProviderError,
    RetryExhaustedError,
    StreamingNotSupportedError,
    UnsupportedProtocolError,
)
from .classification import classify_exception, status_to_code, walk_exception_chain

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

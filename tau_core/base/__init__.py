"""Core building blocks shared by providers, requests and the execution client.

Only dependency-free modules are re-exported here; streaming, retry and HTTP
helpers are imported from their own subpackages.
"""

from .cancellation import CancellationToken, CancelledError, DeadlineExceededError
from .errors import (
    ErrorCode,
    HTTPStatusError,
    MarshalError,
    ProviderConfigError,
    ProviderError,
    RetryExhaustedError,
    StreamingNotSupportedError,
    UnsupportedProtocolError,
    classify_exception,
)
from .models import Message, Model, ToolDefinition
from .protocol import Protocol, protocol_strings, valid_protocols

__all__ = [
    "CancellationToken",
    "CancelledError",
    "DeadlineExceededError",
    "ErrorCode",
    "HTTPStatusError",
    "MarshalError",
    "Message",
    "Model",
    "Protocol",
    "ProviderConfigError",
    "ProviderError",
    "RetryExhaustedError",
    "StreamingNotSupportedError",
    "ToolDefinition",
    "UnsupportedProtocolError",
    "classify_exception",
    "protocol_strings",
    "valid_protocols",
]

"""
Structured provider error exception types.

`ProviderError` wraps failures with a normalized `ErrorCode` and the execution
phase (marshal / prepare / send / decode) in which they happened. The original
low-level exception stays reachable through ``raw`` and ``__cause__`` so the
retry classifier can unwrap to the root cause.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (e.g., ``"ollama"``).
        model: Optional model name associated with the failure.
        retryable: Hint for callers (the retry policy classifies on its own).
        raw: Optional original exception for diagnostics.
        phase: Execution phase (``"marshal"``, ``"prepare"``, ``"send"``,
            ``"decode"``, ``"stream"``) when known.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[BaseException] = None
    phase: Optional[str] = None

    def __str__(self) -> str:
        """Return a compact string combining provider, model, phase, code, and message."""
        where = f" [{self.phase}]" if self.phase else ""
        return f"{self.provider}:{self.model or '-'}{where} {self.code.value}: {self.message}"


@dataclass(eq=False)
class HTTPStatusError(ProviderError):
    """The server responded, but with a non-2xx status.

    Distinguishes "the server refused" from "the network failed"; the retry
    policy only retries 429, 502, 503 and 504.
    """

    status_code: int = 0
    status: str = ""
    body: bytes = b""

    def __str__(self) -> str:
        if self.body:
            return f"HTTP {self.status_code}: {self.status} - {self.body.decode('utf-8', errors='replace')}"
        return f"HTTP {self.status_code}: {self.status}"


@dataclass(eq=False)
class RetryExhaustedError(ProviderError):
    """Raised after the configured number of attempts all failed transiently."""

    attempts: int = 0

    def __str__(self) -> str:
        return f"max retries ({max(self.attempts - 1, 0)}) exceeded: {self.message}"


class MarshalError(ProviderError):
    """Payload shape does not fit the protocol (e.g., vision without images)."""


class UnsupportedProtocolError(ProviderError):
    """The provider has no endpoint for the requested protocol."""


class StreamingNotSupportedError(ProviderError):
    """Streaming was requested for a protocol that never streams."""


class ProviderConfigError(ProviderError):
    """Provider construction failed because configuration is missing or invalid."""


__all__ = [
    "ProviderError",
    "HTTPStatusError",
    "RetryExhaustedError",
    "MarshalError",
    "UnsupportedProtocolError",
    "StreamingNotSupportedError",
    "ProviderConfigError",
]

"""
Provider-agnostic interfaces (Protocols) for the execution layer.

``Provider`` is the per-backend strategy the execution client drives;
``Request`` is the per-protocol value object handed to ``execute``. Both are
structural so test doubles and third-party strategies need no base class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Optional, Protocol as TypingProtocol, runtime_checkable

import httpx

from .protocol import Protocol

if TYPE_CHECKING:  # pragma: no cover
    from ..response import StreamingChunk
    from .models import Model
    from .streaming.event_stream import LinePayload
    from .streaming.metrics import StreamMetrics


@dataclass(frozen=True)
class ProviderRequest:
    """A prepared HTTP call: resolved URL, headers and marshaled body."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@runtime_checkable
class Provider(TypingProtocol):
    """Backend strategy: endpoints, auth, wire format and response decoding."""

    @property
    def name(self) -> str: ...

    @property
    def base_url(self) -> str: ...

    def endpoint(self, protocol: Protocol) -> str: ...

    def set_headers(self, request: httpx.Request) -> None: ...

    def marshal(self, protocol: Protocol, data: Any) -> bytes: ...

    def prepare_request(self, protocol: Protocol, body: bytes, headers: Dict[str, str]) -> ProviderRequest: ...

    def prepare_stream_request(
        self, protocol: Protocol, body: bytes, headers: Dict[str, str]
    ) -> ProviderRequest: ...

    async def process_response(self, response: httpx.Response, protocol: Protocol) -> Any: ...

    def process_stream_response(
        self,
        response: httpx.Response,
        protocol: Protocol,
        metrics: Optional["StreamMetrics"] = None,
    ) -> AsyncIterator["StreamingChunk"]: ...

    def stream_payload(self, line: str) -> "LinePayload": ...


@runtime_checkable
class Request(TypingProtocol):
    """Protocol-typed request bound to a provider and a model."""

    @property
    def protocol(self) -> Protocol: ...

    @property
    def provider(self) -> Provider: ...

    @property
    def model(self) -> "Model": ...

    @property
    def options(self) -> Dict[str, Any]: ...

    def headers(self) -> Dict[str, str]: ...

    def marshal(self) -> bytes: ...


__all__ = ["Provider", "ProviderRequest", "Request"]

"""Ollama provider (local OpenAI-compatible server).

Purpose:
        Drives a local or self-hosted server exposing the OpenAI-compatible
        API (default ``http://localhost:11434``). The base URL is normalized to
        end in ``/v1``; chat, vision and tools share ``/chat/completions`` and
        embeddings use ``/embeddings``.

Authentication:
        Optional. ``options.auth_type`` selects ``bearer``
        (``Authorization: Bearer <token>``) or ``api_key`` (header named by
        ``options.auth_header``, default ``X-API-Key``). Nothing is sent when
        the token is empty.

Streaming:
        A line equal to ``data: [DONE]`` terminates the stream. Lines with a
        ``data:`` prefix are stripped; other lines are decoded as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import httpx

from ..base.errors import ErrorCode, UnsupportedProtocolError
from ..base.protocol import Protocol
from ..base.streaming.event_stream import END_OF_STREAM, LinePayload, strip_data_prefix
from ..providers.base import STREAM_DONE, BaseProvider

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ProviderConfig

API_VERSION_SEGMENT = "/v1"
DEFAULT_API_KEY_HEADER = "X-API-Key"

_ENDPOINTS: Dict[Protocol, str] = {
    Protocol.CHAT: "/chat/completions",
    Protocol.VISION: "/chat/completions",
    Protocol.TOOLS: "/chat/completions",
    Protocol.EMBEDDINGS: "/embeddings",
}


def normalize_base_url(base_url: str) -> str:
    """Ensure ``base_url`` ends in ``/v1`` (``http://h``, ``http://h/``, ``http://h/v1`` agree)."""
    url = (base_url or "").strip()
    if url.endswith(API_VERSION_SEGMENT):
        return url
    return url.rstrip("/") + API_VERSION_SEGMENT


def _option_str(options: Mapping[str, Any], key: str) -> str:
    value = options.get(key)
    return value.strip() if isinstance(value, str) else ""


class OllamaProvider(BaseProvider):
    """Local OpenAI-compatible backend."""

    def __init__(self, name: str, base_url: str, options: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(name, normalize_base_url(base_url))
        self._options: Dict[str, Any] = dict(options or {})

    @classmethod
    def from_config(cls, cfg: "ProviderConfig") -> "OllamaProvider":
        return cls(cfg.name, cfg.base_url, cfg.options)

    def endpoint(self, protocol: Protocol) -> str:
        path = _ENDPOINTS.get(Protocol(protocol))
        if path is None:  # pragma: no cover - every protocol is mapped
            raise UnsupportedProtocolError(
                code=ErrorCode.UNSUPPORTED,
                message=f"protocol {protocol} not supported by Ollama",
                provider=self.name,
                phase="prepare",
            )
        return f"{self.base_url}{path}"

    def set_headers(self, request: httpx.Request) -> None:
        token = _option_str(self._options, "token")
        if not token:
            return
        auth_type = _option_str(self._options, "auth_type")
        if auth_type == "bearer":
            request.headers["Authorization"] = f"Bearer {token}"
        elif auth_type == "api_key":
            header = _option_str(self._options, "auth_header") or DEFAULT_API_KEY_HEADER
            request.headers[header] = token

    def stream_payload(self, line: str) -> LinePayload:
        if line == f"data: {STREAM_DONE}":
            return END_OF_STREAM
        payload = strip_data_prefix(line)
        return line if payload is None else payload


__all__ = ["OllamaProvider", "normalize_base_url"]

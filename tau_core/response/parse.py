"""
Pure decoders from raw bytes to typed responses.

Every function takes bytes (or str) and returns a typed model or raises
:class:`ResponseDecodeError`; no I/O happens here.
"""

from __future__ import annotations

from typing import Callable, Dict, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..base.protocol import Protocol
from .chat import ChatResponse
from .embeddings import EmbeddingsResponse
from .streaming import StreamingChunk
from .tools import ToolsResponse

M = TypeVar("M", bound=BaseModel)
Body = Union[bytes, bytearray, str]
AnyResponse = Union[ChatResponse, ToolsResponse, EmbeddingsResponse]


class ResponseDecodeError(ValueError):
    """Raised when a payload cannot be decoded into the expected shape."""

    def __init__(self, what: str, cause: Exception) -> None:
        super().__init__(f"failed to parse {what}: {cause}")
        self.what = what


def _decode(model: Type[M], body: Body, what: str) -> M:
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise ResponseDecodeError(what, exc) from exc


def parse_chat(body: Body) -> ChatResponse:
    return _decode(ChatResponse, body, "chat response")


def parse_vision(body: Body) -> ChatResponse:
    return _decode(ChatResponse, body, "vision response")


def parse_tools(body: Body) -> ToolsResponse:
    return _decode(ToolsResponse, body, "tools response")


def parse_embeddings(body: Body) -> EmbeddingsResponse:
    return _decode(EmbeddingsResponse, body, "embeddings response")


def parse_chat_stream_chunk(data: Body) -> StreamingChunk:
    return _decode(StreamingChunk, data, "streaming chunk")


def parse_tools_stream_chunk(data: Body) -> StreamingChunk:
    return _decode(StreamingChunk, data, "tools streaming chunk")


_PARSERS: Dict[Protocol, Callable[[Body], AnyResponse]] = {
    Protocol.CHAT: parse_chat,
    Protocol.VISION: parse_vision,
    Protocol.TOOLS: parse_tools,
    Protocol.EMBEDDINGS: parse_embeddings,
}

_CHUNK_PARSERS: Dict[Protocol, Callable[[Body], StreamingChunk]] = {
    Protocol.CHAT: parse_chat_stream_chunk,
    Protocol.VISION: parse_chat_stream_chunk,
    Protocol.TOOLS: parse_tools_stream_chunk,
}


def parse(protocol: Protocol, body: Body) -> AnyResponse:
    """Decode an atomic response body for ``protocol``."""
    parser = _PARSERS.get(Protocol(protocol))
    if parser is None:  # pragma: no cover - every Protocol member is mapped
        raise ResponseDecodeError("response", ValueError(f"unsupported protocol: {protocol}"))
    return parser(body)


def parse_stream_chunk(protocol: Protocol, data: Body) -> StreamingChunk:
    """Decode one streaming payload; embeddings never stream."""
    protocol = Protocol(protocol)
    parser = _CHUNK_PARSERS.get(protocol)
    if parser is None:
        raise ResponseDecodeError(
            "streaming chunk", ValueError(f"protocol {protocol.value} does not support streaming")
        )
    return parser(data)


__all__ = [
    "ResponseDecodeError",
    "parse",
    "parse_chat",
    "parse_vision",
    "parse_tools",
    "parse_embeddings",
    "parse_stream_chunk",
    "parse_chat_stream_chunk",
    "parse_tools_stream_chunk",
]

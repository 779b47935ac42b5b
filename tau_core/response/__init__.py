"""Typed response models and decoders."""

from .chat import ChatChoice, ChatResponse, Delta, ResponseMessage
from .embeddings import Embedding, EmbeddingsResponse
from .parse import ResponseDecodeError, parse, parse_stream_chunk
from .streaming import StreamingChoice, StreamingChunk
from .tools import ToolCall, ToolCallFunction, ToolsResponse
from .usage import TokenUsage

__all__ = [
    "ChatChoice",
    "ChatResponse",
    "Delta",
    "Embedding",
    "EmbeddingsResponse",
    "ResponseDecodeError",
    "ResponseMessage",
    "StreamingChoice",
    "StreamingChunk",
    "TokenUsage",
    "ToolCall",
    "ToolCallFunction",
    "ToolsResponse",
    "parse",
    "parse_stream_chunk",
]

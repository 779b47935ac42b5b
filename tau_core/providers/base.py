"""
Shared provider behavior for OpenAI-compatible backends.

``BaseProvider`` implements the parts every shipped backend has in common:
marshaling the four protocol payloads into the OpenAI wire shape, preparing
standard and streaming HTTP calls, and decoding atomic and streamed responses.
Concrete providers add endpoint resolution, authentication and their stream
line framing (``stream_payload``).
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

import httpx

from ..base.errors import (
    ErrorCode,
    HTTPStatusError,
    MarshalError,
    ProviderError,
    UnsupportedProtocolError,
    status_to_code,
)
from ..base.interfaces import ProviderRequest
from ..base.models import Message
from ..base.protocol import Protocol
from ..base.resilience.retry import RETRYABLE_STATUS_CODES
from ..base.streaming.event_stream import END_OF_STREAM, LinePayload, iter_stream_chunks, strip_data_prefix
from ..base.streaming.metrics import StreamMetrics
from ..response import ResponseDecodeError, StreamingChunk, parse
from .data import ChatData, EmbeddingsData, ToolsData, VisionData

STREAM_DONE = "[DONE]"
STREAM_HEADERS: Mapping[str, str] = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}


def status_error(
    provider: str,
    response: httpx.Response,
    body: bytes,
    *,
    model: Optional[str] = None,
) -> HTTPStatusError:
    """Build the error for a non-2xx response, embedding the body for diagnostics."""
    status_code = response.status_code
    return HTTPStatusError(
        code=status_to_code(status_code),
        message=f"request failed with status {status_code}",
        provider=provider,
        model=model,
        retryable=status_code in RETRYABLE_STATUS_CODES,
        phase="send",
        status_code=status_code,
        status=response.reason_phrase,
        body=body,
    )


def _message_dict(message: Any) -> Dict[str, Any]:
    if isinstance(message, Message):
        return message.to_dict()
    return dict(message)


class BaseProvider:
    """Default OpenAI-compatible strategy; subclasses supply ``endpoint`` and auth."""

    def __init__(self, name: str, base_url: str) -> None:
        self._name = name
        self._base_url = base_url

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    def endpoint(self, protocol: Protocol) -> str:  # pragma: no cover - abstract
        raise UnsupportedProtocolError(
            code=ErrorCode.UNSUPPORTED,
            message=f"protocol {Protocol(protocol).value} not supported by {self._name}",
            provider=self._name,
            phase="prepare",
        )

    def set_headers(self, request: httpx.Request) -> None:
        """Inject authentication headers; the default adds none."""

    # -- marshaling ---------------------------------------------------------
    def marshal(self, protocol: Protocol, data: Any) -> bytes:
        """Convert a protocol payload into the wire JSON body."""
        protocol = Protocol(protocol)
        if protocol is Protocol.CHAT:
            payload = self._marshal_chat(data)
        elif protocol is Protocol.VISION:
            payload = self._marshal_vision(data)
        elif protocol is Protocol.TOOLS:
            payload = self._marshal_tools(data)
        else:
            payload = self._marshal_embeddings(data)
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    def _marshal_error(self, message: str) -> MarshalError:
        return MarshalError(
            code=ErrorCode.VALIDATION,
            message=message,
            provider=self._name,
            phase="marshal",
        )

    def _expect(self, data: Any, kind: type) -> None:
        if not isinstance(data, kind):
            raise self._marshal_error(f"expected {kind.__name__}, got {type(data).__name__}")

    def _marshal_chat(self, data: Any) -> Dict[str, Any]:
        self._expect(data, ChatData)
        combined: Dict[str, Any] = {
            "model": data.model,
            "messages": [_message_dict(m) for m in data.messages],
        }
        combined.update(data.options)
        return combined

    def _marshal_vision(self, data: Any) -> Dict[str, Any]:
        """Rewrite the last message into one text block plus one block per image.

        The caller's message list is copied; nothing is mutated in place.
        """
        self._expect(data, VisionData)
        if not data.messages:
            raise self._marshal_error("messages cannot be empty for vision requests")
        if not data.images:
            raise self._marshal_error("images cannot be empty for vision requests")

        last = data.messages[-1]
        last_role = last.role if isinstance(last, Message) else last.get("role")
        last_content = last.content if isinstance(last, Message) else last.get("content")
        if not isinstance(last_content, str):
            raise self._marshal_error("message content must be a string for vision transformation")

        content: List[Dict[str, Any]] = [{"type": "text", "text": last_content}]
        for url in data.images:
            image_url: Dict[str, Any] = {"url": url}
            image_url.update(data.vision_options or {})
            content.append({"type": "image_url", "image_url": image_url})

        messages = [_message_dict(m) for m in data.messages[:-1]]
        messages.append({"role": last_role, "content": content})
        combined: Dict[str, Any] = {"model": data.model, "messages": messages}
        combined.update(data.options)
        return combined

    def _marshal_tools(self, data: Any) -> Dict[str, Any]:
        self._expect(data, ToolsData)
        combined: Dict[str, Any] = {
            "model": data.model,
            "messages": [_message_dict(m) for m in data.messages],
            "tools": [{"type": "function", "function": tool.to_dict()} for tool in data.tools],
        }
        combined.update(data.options)
        return combined

    def _marshal_embeddings(self, data: Any) -> Dict[str, Any]:
        self._expect(data, EmbeddingsData)
        value = data.input if isinstance(data.input, str) else list(data.input)
        combined: Dict[str, Any] = {"model": data.model, "input": value}
        combined.update(data.options)
        return combined

    # -- request preparation --------------------------------------------------
    def prepare_request(self, protocol: Protocol, body: bytes, headers: Dict[str, str]) -> ProviderRequest:
        return ProviderRequest(url=self.endpoint(protocol), headers=dict(headers), body=body)

    def prepare_stream_request(self, protocol: Protocol, body: bytes, headers: Dict[str, str]) -> ProviderRequest:
        stream_headers = dict(headers)
        stream_headers.update(STREAM_HEADERS)
        return ProviderRequest(url=self.endpoint(protocol), headers=stream_headers, body=body)

    # -- response handling ----------------------------------------------------
    async def process_response(self, response: httpx.Response, protocol: Protocol) -> Any:
        """Decode a complete response; non-2xx becomes ``HTTPStatusError``."""
        body = await response.aread()
        if not response.is_success:
            raise status_error(self._name, response, body)
        try:
            return parse(protocol, body)
        except ResponseDecodeError as exc:
            raise ProviderError(
                code=ErrorCode.VALIDATION,
                message=str(exc),
                provider=self._name,
                raw=exc,
                phase="decode",
            ) from exc

    def process_stream_response(
        self,
        response: httpx.Response,
        protocol: Protocol,
        metrics: Optional[StreamMetrics] = None,
    ) -> AsyncIterator[StreamingChunk]:
        """Live decoder over the response body (consumed by the decode worker)."""
        return iter_stream_chunks(
            response,
            Protocol(protocol),
            self.stream_payload,
            provider=self._name,
            metrics=metrics,
        )

    def stream_payload(self, line: str) -> LinePayload:
        """SSE framing: only ``data:`` lines count and ``[DONE]`` ends the stream."""
        payload = strip_data_prefix(line)
        if payload is None:
            return None
        if payload == STREAM_DONE:
            return END_OF_STREAM
        return payload

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"{type(self).__name__}(name={self._name!r}, base_url={self._base_url!r})"


__all__ = ["BaseProvider", "STREAM_DONE", "STREAM_HEADERS", "status_error"]

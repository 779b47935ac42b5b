"""Shared testing utilities for execution and streaming tests.

Purpose:
    Build canned wire payloads and mock transports so individual test modules
    stay focused on behavior rather than HTTP plumbing. Nothing here touches
    the network: responses are produced by ``httpx.MockTransport`` handlers.

Exports:
    - RecordingTransport: mock transport remembering every request served.
    - TrackedStream: response body counting ``aclose`` calls.
    - sse / chunk / chat_body: canned payload builders.
    - fast_client_config: client config with millisecond backoffs.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from tau_core.config import ClientConfig, RetryConfig

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


class TrackedStream(httpx.AsyncByteStream):
    """Response body that counts ``aclose`` calls.

    Yields ``chunks`` then ends, raises ``fail_with``, or blocks forever when
    ``hang`` is set.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        fail_with: Optional[BaseException] = None,
        hang: bool = False,
    ) -> None:
        self._chunks = list(chunks)
        self._fail_with = fail_with
        self._hang = hang
        self.closed = 0

    async def __aiter__(self):
        for part in self._chunks:
            yield part
        if self._fail_with is not None:
            raise self._fail_with
        if self._hang:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed += 1


def sse(*payloads: Any, done: bool = True) -> bytes:
    """Encode payloads as ``data:`` lines (dicts are JSON encoded)."""
    lines = []
    for p in payloads:
        text = p if isinstance(p, str) else json.dumps(p)
        lines.append(f"data: {text}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def chunk(content: str) -> Dict[str, Any]:
    return {
        "id": "chunk-1",
        "object": "chat.completion.chunk",
        "choices": [{"index": 0, "delta": {"content": content}}],
    }


def chat_body(content: Any, **usage: int) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "id": "cmpl-1",
        "object": "chat.completion",
        "model": "llama3",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }
    if usage:
        body["usage"] = usage
    return body


def fast_client_config(max_retries: int = 2, **retry: Any) -> ClientConfig:
    """Client config whose backoffs are a few milliseconds, jitter off."""
    retry.setdefault("initial_backoff", 0.001)
    retry.setdefault("max_backoff", 0.01)
    retry.setdefault("jitter", False)
    return ClientConfig(retry=RetryConfig(max_retries=max_retries, **retry))


__all__ = [
    "RecordingTransport",
    "TrackedStream",
    "chat_body",
    "chunk",
    "fast_client_config",
    "sse",
]

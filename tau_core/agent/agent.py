"""
High-level agent wrapper.

Bundles one provider, one model and one execution client built from an
:class:`~tau_core.config.AgentConfig` and offers one call per protocol. The
configured system prompt is injected as the first message; per-call option
maps are merged in order (later wins) on top of the model defaults.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union

import httpx

from ..base.cancellation import CancellationToken
from ..base.factory import ProviderFactory, UnknownProviderError
from ..base.errors import ProviderError
from ..base.interfaces import Provider, Request
from ..base.models import Message, Model, ToolDefinition
from ..base.streaming import ChunkStream
from ..client import ExecutionClient
from ..config import AgentConfig
from ..request import ChatRequest, EmbeddingsRequest, ToolsRequest, VisionRequest
from ..response import ChatResponse, EmbeddingsResponse, ToolsResponse
from .errors import AgentError, AgentErrorKind, client_label

R = TypeVar("R")


def _merge(options: Sequence[Optional[Mapping[str, Any]]]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for opts in options:
        if opts:
            merged.update(opts)
    return merged


class Agent:
    """Conversational convenience layer over :class:`ExecutionClient`."""

    def __init__(
        self,
        config: AgentConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        try:
            provider = ProviderFactory.create(config.provider)
        except (UnknownProviderError, ProviderError) as exc:
            raise AgentError.init(f"failed to create provider: {exc}", config, exc) from exc
        try:
            model = Model.from_config(config.model)
        except ValueError as exc:
            raise AgentError.init(f"failed to create model: {exc}", config, exc) from exc

        self._id = str(uuid.uuid4())
        self._config = config
        self._provider = provider
        self._model = model
        self._client = ExecutionClient(config.client, transport=transport)
        self._system_prompt = config.system_prompt

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def client(self) -> ExecutionClient:
        return self._client

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def model(self) -> Model:
        return self._model

    # -- protocol calls ---------------------------------------------------------
    async def chat(
        self, prompt: str, *options: Optional[Mapping[str, Any]], token: Optional[CancellationToken] = None
    ) -> ChatResponse:
        request = ChatRequest(self._provider, self._model, self._messages(prompt), _merge(options))
        return await self._execute(request, ChatResponse, token)

    async def chat_stream(
        self, prompt: str, *options: Optional[Mapping[str, Any]], token: Optional[CancellationToken] = None
    ) -> ChunkStream:
        opts = _merge(options)
        opts["stream"] = True
        request = ChatRequest(self._provider, self._model, self._messages(prompt), opts)
        return await self._client.execute_stream(request, token)

    async def vision(
        self,
        prompt: str,
        images: Sequence[str],
        *options: Optional[Mapping[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> ChatResponse:
        request = VisionRequest(self._provider, self._model, self._messages(prompt), images, options=_merge(options))
        return await self._execute(request, ChatResponse, token)

    async def vision_stream(
        self,
        prompt: str,
        images: Sequence[str],
        *options: Optional[Mapping[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> ChunkStream:
        opts = _merge(options)
        opts["stream"] = True
        request = VisionRequest(self._provider, self._model, self._messages(prompt), images, options=opts)
        return await self._client.execute_stream(request, token)

    async def tools(
        self,
        prompt: str,
        tools: Sequence[ToolDefinition],
        *options: Optional[Mapping[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> ToolsResponse:
        request = ToolsRequest(self._provider, self._model, self._messages(prompt), tools, _merge(options))
        return await self._execute(request, ToolsResponse, token)

    async def embed(
        self,
        input: Union[str, Sequence[str]],  # noqa: A002 - wire field name
        *options: Optional[Mapping[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> EmbeddingsResponse:
        request = EmbeddingsRequest(self._provider, self._model, input, _merge(options))
        return await self._execute(request, EmbeddingsResponse, token)

    # -- helpers ----------------------------------------------------------------
    def _messages(self, prompt: str) -> List[Message]:
        messages: List[Message] = []
        if self._system_prompt:
            messages.append(Message("system", self._system_prompt))
        messages.append(Message("user", prompt))
        return messages

    async def _execute(self, request: Request, expected: Type[R], token: Optional[CancellationToken]) -> R:
        result = await self._client.execute(request, token)
        if not isinstance(result, expected):
            raise AgentError(
                kind=AgentErrorKind.LLM,
                message=f"unexpected response type: {type(result).__name__}",
                name=self._config.name,
                client=client_label(self._config),
            )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "Agent":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"Agent(id={self._id!r}, name={self.name!r}, client={client_label(self._config)!r})"


__all__ = ["Agent"]

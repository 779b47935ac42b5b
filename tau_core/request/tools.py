"""Tools request: messages plus tool definitions the model may call."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from ..base.interfaces import Provider
from ..base.models import Message, Model, ToolDefinition
from ..base.protocol import Protocol
from ..providers.data import ToolsData
from .base import BaseRequest


class ToolsRequest(BaseRequest):
    PROTOCOL = Protocol.TOOLS

    def __init__(
        self,
        provider: Provider,
        model: Model,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(provider, model, options)
        self._messages: List[Message] = list(messages)
        self._tools: List[ToolDefinition] = list(tools)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def tools(self) -> List[ToolDefinition]:
        return list(self._tools)

    def marshal(self) -> bytes:
        return self._provider.marshal(
            Protocol.TOOLS,
            ToolsData(
                model=self._model.name,
                messages=list(self._messages),
                tools=list(self._tools),
                options=dict(self._options),
            ),
        )


__all__ = ["ToolsRequest"]

"""Chat request."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from ..base.interfaces import Provider
from ..base.models import Message, Model
from ..base.protocol import Protocol
from ..providers.data import ChatData
from .base import BaseRequest


class ChatRequest(BaseRequest):
    PROTOCOL = Protocol.CHAT

    def __init__(
        self,
        provider: Provider,
        model: Model,
        messages: Sequence[Message],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(provider, model, options)
        self._messages: List[Message] = list(messages)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def marshal(self) -> bytes:
        return self._provider.marshal(
            Protocol.CHAT,
            ChatData(model=self._model.name, messages=list(self._messages), options=dict(self._options)),
        )


__all__ = ["ChatRequest"]

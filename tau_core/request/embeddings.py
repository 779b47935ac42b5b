"""Embeddings request: one input string or a batch."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Union

from ..base.interfaces import Provider
from ..base.models import Model
from ..base.protocol import Protocol
from ..providers.data import EmbeddingsData
from .base import BaseRequest


class EmbeddingsRequest(BaseRequest):
    PROTOCOL = Protocol.EMBEDDINGS

    def __init__(
        self,
        provider: Provider,
        model: Model,
        input: Union[str, Sequence[str]],  # noqa: A002 - wire field name
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(provider, model, options)
        self._input: Union[str, List[str]] = input if isinstance(input, str) else list(input)

    @property
    def input(self) -> Union[str, List[str]]:
        return self._input if isinstance(self._input, str) else list(self._input)

    def marshal(self) -> bytes:
        return self._provider.marshal(
            Protocol.EMBEDDINGS,
            EmbeddingsData(model=self._model.name, input=self.input, options=dict(self._options)),
        )


__all__ = ["EmbeddingsRequest"]

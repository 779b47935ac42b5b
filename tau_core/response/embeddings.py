"""Embeddings response shape."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .usage import TokenUsage


class Embedding(BaseModel):
    model_config = ConfigDict(extra="ignore")

    embedding: List[float] = Field(default_factory=list)
    index: int = 0
    object: str = "embedding"


class EmbeddingsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: str = ""
    data: List[Embedding] = Field(default_factory=list)
    model: str = ""
    usage: Optional[TokenUsage] = None

    def vectors(self) -> List[List[float]]:
        """Embedding vectors ordered by their ``index``."""
        return [item.embedding for item in sorted(self.data, key=lambda item: item.index)]


__all__ = ["Embedding", "EmbeddingsResponse"]

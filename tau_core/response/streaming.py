"""Streaming chunk shape.

A chunk is independent of every other chunk; accumulation is up to the
caller. A chunk delivered with ``error`` set is the last one of its stream.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .chat import Delta


class StreamingChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    delta: Delta = Field(default_factory=Delta)
    finish_reason: Optional[str] = None


class StreamingChunk(BaseModel):
    """One decoded stream event.

    ``error`` is local state only: it is never read from nor written to JSON.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: List[StreamingChoice] = Field(default_factory=list)

    _error: Optional[BaseException] = PrivateAttr(default=None)

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def content(self) -> str:
        """Content of the first delta, or ``""``."""
        if not self.choices:
            return ""
        return self.choices[0].delta.content or ""

    @classmethod
    def from_error(cls, error: BaseException) -> "StreamingChunk":
        """Terminal chunk carrying a mid-stream failure."""
        chunk = cls()
        chunk._error = error
        return chunk


__all__ = ["StreamingChoice", "StreamingChunk"]

"""
Chat (and vision) response shape.

Vision responses share this model; only the request side differs.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .usage import TokenUsage


class ResponseMessage(BaseModel):
    """Assistant message inside a choice; content may be text or structured parts."""

    model_config = ConfigDict(extra="ignore")

    role: str = ""
    content: Any = None


class Delta(BaseModel):
    """Incremental message fragment (streaming and some echo servers)."""

    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Optional[str] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ResponseMessage = Field(default_factory=ResponseMessage)
    delta: Optional[Delta] = None
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    """Atomic chat completion response."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: List[ChatChoice] = Field(default_factory=list)
    usage: Optional[TokenUsage] = None

    def content(self) -> str:
        """Text of the first choice.

        Structured content is rendered as JSON text; no choices yields ``""``.
        """
        if not self.choices:
            return ""
        value = self.choices[0].message.content
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)


__all__ = ["ChatChoice", "ChatResponse", "Delta", "ResponseMessage"]

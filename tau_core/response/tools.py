"""Tool-calling response shape.

Calls requested by the model are relayed as data; nothing here executes them.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .usage import TokenUsage


class ToolCallFunction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    arguments: str = ""

    def parsed_arguments(self) -> Dict[str, Any]:
        """Decode ``arguments`` (a JSON string on the wire) into a dict.

        Empty arguments decode to ``{}``. Raises ``ValueError`` when the string
        is not a JSON object.
        """
        if not self.arguments.strip():
            return {}
        value = json.loads(self.arguments)
        if not isinstance(value, dict):
            raise ValueError(f"tool call arguments must be a JSON object, got {type(value).__name__}")
        return value


class ToolCall(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: str = "function"
    function: ToolCallFunction = Field(default_factory=ToolCallFunction)


class ToolsMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = ""
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)


class ToolsChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ToolsMessage = Field(default_factory=ToolsMessage)
    finish_reason: Optional[str] = None


class ToolsResponse(BaseModel):
    """Atomic tools response: assistant text plus requested tool calls."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: List[ToolsChoice] = Field(default_factory=list)
    usage: Optional[TokenUsage] = None

    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""

    def tool_calls(self) -> List[ToolCall]:
        """Tool calls of the first choice (empty when the model answered in text)."""
        if not self.choices:
            return []
        return list(self.choices[0].message.tool_calls)


__all__ = ["ToolCall", "ToolCallFunction", "ToolsChoice", "ToolsMessage", "ToolsResponse"]

"""
Provider-agnostic tool (function) definition.

Providers transform this generic format into their own wire shape; the
OpenAI-compatible default nests it under ``{"type": "function", ...}``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ToolDefinition:
    """A function the model may request to call.

    Attributes:
        name: Function name exposed to the model.
        description: Human-readable description guiding tool selection.
        parameters: JSON-schema-like mapping describing the arguments.
    """

    name: str
    description: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


__all__ = ["ToolDefinition"]

"""Model parts package.

One-class-per-file implementations re-exported by ``tau_core.base.models``.
"""

from .message import Message
from .model import Model
from .tool_definition import ToolDefinition

__all__ = ["Message", "Model", "ToolDefinition"]

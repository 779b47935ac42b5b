"""
Provider-agnostic domain models public surface.

Re-exports the one-class-per-file implementations under
``tau_core.base.models_parts`` to keep a stable import path.
"""

from .models_parts.message import Message
from .models_parts.model import Model
from .models_parts.tool_definition import ToolDefinition

__all__ = ["Message", "Model", "ToolDefinition"]

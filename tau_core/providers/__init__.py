"""Provider base behavior and protocol payloads."""

from .base import BaseProvider, status_error
from .data import ChatData, EmbeddingsData, ToolsData, VisionData

__all__ = ["BaseProvider", "ChatData", "EmbeddingsData", "ToolsData", "VisionData", "status_error"]

"""Protocol request value objects (one per protocol)."""

from .base import BaseRequest, merge_options
from .chat import ChatRequest
from .embeddings import EmbeddingsRequest
from .tools import ToolsRequest
from .vision import VisionRequest

__all__ = [
    "BaseRequest",
    "ChatRequest",
    "EmbeddingsRequest",
    "ToolsRequest",
    "VisionRequest",
    "merge_options",
]

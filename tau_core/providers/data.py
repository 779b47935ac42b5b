"""Protocol-specific payloads handed from requests to ``Provider.marshal``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

from ..base.models import Message, ToolDefinition


@dataclass(frozen=True)
class ChatData:
    model: str
    messages: List[Message]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VisionData:
    """Vision payload; ``vision_options`` are merged into every ``image_url`` block."""

    model: str
    messages: List[Message]
    images: List[str]
    vision_options: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolsData:
    model: str
    messages: List[Message]
    tools: List[ToolDefinition]
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EmbeddingsData:
    """Embeddings payload; ``input`` is one string or a batch of strings."""

    model: str
    input: Union[str, Sequence[str]]
    options: Dict[str, Any] = field(default_factory=dict)


__all__ = ["ChatData", "EmbeddingsData", "ToolsData", "VisionData"]

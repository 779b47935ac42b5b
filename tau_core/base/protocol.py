"""
LLM interaction protocols.

Defines the ``Protocol`` enumeration identifying the four supported operation
kinds (chat, vision, tools, embeddings). Values are lowercase strings and are
a stable public contract for configuration files and logs.
"""
from __future__ import annotations

from enum import Enum
from typing import List


class Protocol(str, Enum):
    """Enumerated LLM operation kinds."""

    CHAT = "chat"
    VISION = "vision"
    TOOLS = "tools"
    EMBEDDINGS = "embeddings"

    def supports_streaming(self) -> bool:
        """Return True when responses for this protocol can be streamed.

        Chat, vision and tools stream; embeddings never do.
        """
        return self in _STREAMING

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Return True if ``value`` names a supported protocol."""
        return value in cls._value2member_map_


_STREAMING = frozenset({Protocol.CHAT, Protocol.VISION, Protocol.TOOLS})


def valid_protocols() -> List[Protocol]:
    """Return all protocols in canonical order (chat, vision, tools, embeddings)."""
    return [Protocol.CHAT, Protocol.VISION, Protocol.TOOLS, Protocol.EMBEDDINGS]


def protocol_strings() -> str:
    """Comma-separated protocol names, for help and error messages."""
    return ", ".join(p.value for p in valid_protocols())


__all__ = ["Protocol", "valid_protocols", "protocol_strings"]

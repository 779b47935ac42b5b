"""
Message DTO used across providers.

Defines the `Message` dataclass representing a single conversation turn.
Content may be either plain text or a structured multimodal payload (a list
of text segments and image references). Helpers are provided for common
inspection and text-flattening needs.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class Message:
    """A chat message used by provider-agnostic requests.

    Attributes:
        role: The role of the message author (``"system"``, ``"user"``,
            ``"assistant"``, ``"tool"``). Kept as a free string since
            backends accept provider-specific roles.
        content: Either a plain text string or a structured multimodal
            payload (typically a list of ``{"type": ...}`` mappings).

    Instances are frozen; providers that need to rewrite content (vision
    marshaling) build a transformed copy instead of mutating the original.
    """

    role: str
    content: Any

    def is_structured(self) -> bool:
        """Return True if the message content is not plain text."""
        return not isinstance(self.content, str)

    def text_or_joined(self) -> str:
        """Return a flattened string representation of the message content.

        Plain text is returned as-is. For structured lists, ``text`` values are
        joined with newlines and non-text parts are rendered as bracketed type
        tokens (``[image_url]``) for compact logging.
        """
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            parts: List[str] = []
            for p in self.content:
                if isinstance(p, dict):
                    text = p.get("text")
                    parts.append(text if text else f"[{p.get('type', 'other')}]")
                else:
                    parts.append(str(p))
            return "\n".join(parts)
        return json.dumps(self.content, ensure_ascii=False, default=str)

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation ``{"role": ..., "content": ...}``."""
        return {"role": self.role, "content": self.content}


__all__ = ["Message"]

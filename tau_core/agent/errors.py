"""Agent error type.

``AgentError`` reports failures of the convenience layer itself: building
the provider/model/client from configuration (``init``) or receiving a
response of an unexpected shape (``llm``). Provider and transport failures
raised during execution propagate unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from ..config import AgentConfig


class AgentErrorKind(str, Enum):
    INIT = "init"
    LLM = "llm"


@dataclass(eq=False)
class AgentError(Exception):
    """Structured agent failure.

    Attributes:
        kind: Failure category.
        message: Human-readable description.
        name: Agent name, when known.
        client: ``provider/model`` label, when known.
        code: Optional machine-readable code.
        cause: Underlying exception (also chained as ``__cause__``).
        timestamp: UTC time the error was created.
    """

    kind: AgentErrorKind
    message: str
    name: str = ""
    client: str = ""
    code: str = ""
    cause: Optional[BaseException] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        if self.client and self.name:
            return f"Agent error [{self.client}/{self.name}]: {self.message}"
        if self.name:
            return f"Agent error [{self.name}]: {self.message}"
        return f"Agent error: {self.message}"

    @classmethod
    def init(cls, message: str, cfg: "AgentConfig", cause: Optional[BaseException] = None) -> "AgentError":
        return cls(
            kind=AgentErrorKind.INIT,
            message=message,
            name=cfg.name,
            client=client_label(cfg),
            cause=cause,
        )


def client_label(cfg: "AgentConfig") -> str:
    """``provider/model`` label with graceful fallbacks (``unknown`` when both are empty)."""
    provider = cfg.provider.name if cfg.provider else ""
    model = cfg.model.name if cfg.model else ""
    if provider and model:
        return f"{provider}/{model}"
    return provider or model or "unknown"


__all__ = ["AgentError", "AgentErrorKind", "client_label"]

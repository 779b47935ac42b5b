"""Agent convenience layer."""

from .agent import Agent
from .errors import AgentError, AgentErrorKind

__all__ = ["Agent", "AgentError", "AgentErrorKind"]

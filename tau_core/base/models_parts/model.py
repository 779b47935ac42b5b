"""
Runtime model descriptor.

Bridges string-keyed configuration (``ModelConfig.capabilities``) with the
Protocol-keyed runtime form used while building requests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict

from ..protocol import Protocol, protocol_strings

if TYPE_CHECKING:
    from ...config import ModelConfig


@dataclass(frozen=True)
class Model:
    """A configured LLM model.

    Attributes:
        name: Model identifier (e.g., ``"llama3.1:8b"``, ``"gpt-4o"``).
        options: Per-protocol default option maps (temperature, max_tokens...).

    Built once from configuration and shared read-only by many requests;
    ``options_for`` hands out copies so callers cannot mutate the defaults.
    """

    name: str
    options: Dict[Protocol, Dict[str, Any]] = field(default_factory=dict)

    def options_for(self, protocol: Protocol) -> Dict[str, Any]:
        """Return a copy of the default options for ``protocol`` (may be empty)."""
        return dict(self.options.get(protocol) or {})

    @classmethod
    def from_config(cls, cfg: "ModelConfig") -> "Model":
        """Create a Model from a ``ModelConfig``.

        Raises:
            ValueError: If a capability key does not name a known protocol.
        """
        options: Dict[Protocol, Dict[str, Any]] = {}
        for name, opts in (cfg.capabilities or {}).items():
            if not Protocol.is_valid(name):
                raise ValueError(
                    f"unknown protocol '{name}' in model capabilities (expected one of: {protocol_strings()})"
                )
            options[Protocol(name)] = dict(opts or {})
        return cls(name=cfg.name, options=options)


__all__ = ["Model"]

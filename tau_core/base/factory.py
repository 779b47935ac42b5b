"""Provider Factory utilities.

Purpose
-------
Resolve a provider name from configuration to a constructed strategy. The
shipped backends are listed in a string-keyed table and imported lazily with
``importlib``; additional backends can be added at runtime with
:meth:`ProviderFactory.register`.

Failure modes
-------------
- Unknown names raise :class:`UnknownProviderError` (``unknown provider: <name>``).
- Construction errors of a known provider (e.g. ``ProviderConfigError`` for
  missing Azure options) propagate unchanged.
"""

from __future__ import annotations

import threading
from importlib import import_module
from typing import TYPE_CHECKING, Callable, Dict, List

from .interfaces import Provider

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ProviderConfig

ProviderConstructor = Callable[["ProviderConfig"], Provider]


class UnknownProviderError(LookupError):
    """Raised when no constructor is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown provider: {name}")
        self.name = name


class ProviderFactory:
    """Create provider strategies from :class:`~tau_core.config.ProviderConfig`.

    Design notes
    ------------
    - Built-in providers map to ``module`` / ``class`` pairs and are imported
      on first use; the class must expose ``from_config``.
    - Registered constructors take precedence over built-ins of the same name.
    """

    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "ollama": {"module": "tau_core.ollama.client", "class": "OllamaProvider"},
        "azure": {"module": "tau_core.azure.client", "class": "AzureProvider"},
    }
    _registered: Dict[str, ProviderConstructor] = {}
    _lock = threading.RLock()

    @classmethod
    def register(cls, name: str, constructor: ProviderConstructor) -> None:
        """Register (or replace) the constructor used for ``name``."""
        with cls._lock:
            cls._registered[name] = constructor

    @classmethod
    def unregister(cls, name: str) -> None:
        with cls._lock:
            cls._registered.pop(name, None)

    @classmethod
    def supported(cls) -> List[str]:
        """Names that :meth:`create` can resolve, sorted."""
        with cls._lock:
            return sorted(set(cls._PROVIDERS) | set(cls._registered))

    @classmethod
    def _resolve(cls, name: str) -> ProviderConstructor:
        with cls._lock:
            constructor = cls._registered.get(name)
        if constructor is not None:
            return constructor
        spec = cls._PROVIDERS.get(name)
        if spec is None:
            raise UnknownProviderError(name)
        module = import_module(spec["module"])
        klass = getattr(module, spec["class"])
        return klass.from_config

    @classmethod
    def create(cls, cfg: "ProviderConfig") -> Provider:
        """Construct the provider named by ``cfg.name``.

        Raises
        ------
        UnknownProviderError
            If the name is neither built in nor registered.
        """
        return cls._resolve(cfg.name)(cfg)


def create_provider(cfg: "ProviderConfig") -> Provider:
    """Shortcut for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(cfg)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_provider"]

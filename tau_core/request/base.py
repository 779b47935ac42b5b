"""Shared plumbing for protocol request value objects.

A request binds a provider and a model to one protocol payload plus a merged
option map (model defaults for the protocol, overlaid by caller options).
Inputs are copied at construction so later caller mutation cannot leak in.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Optional

from ..base.interfaces import Provider
from ..base.models import Model
from ..base.protocol import Protocol

CONTENT_TYPE_JSON = "application/json"


def merge_options(model: Model, protocol: Protocol, options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Model defaults for ``protocol`` overlaid by ``options`` (caller wins)."""
    merged = model.options_for(protocol)
    if options:
        merged.update(options)
    return merged


class BaseRequest:
    """Common accessors; subclasses set ``PROTOCOL`` and implement ``marshal``."""

    PROTOCOL: ClassVar[Protocol]

    def __init__(self, provider: Provider, model: Model, options: Optional[Mapping[str, Any]] = None) -> None:
        self._provider = provider
        self._model = model
        self._options = merge_options(model, self.PROTOCOL, options)

    @property
    def protocol(self) -> Protocol:
        return self.PROTOCOL

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def model(self) -> Model:
        return self._model

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def headers(self) -> Dict[str, str]:
        """Fresh header map on every call; callers may mutate it freely."""
        return {"Content-Type": CONTENT_TYPE_JSON}

    def marshal(self) -> bytes:  # pragma: no cover - abstract
        raise NotImplementedError

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"{type(self).__name__}(provider={self._provider.name!r}, model={self._model.name!r})"


__all__ = ["BaseRequest", "CONTENT_TYPE_JSON", "merge_options"]

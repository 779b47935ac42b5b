"""Vision request: messages plus image URLs (or data URIs).

``vision_options`` (e.g. ``{"detail": "high"}``) are embedded in every image
block. When the merged options carry a ``vision_options`` mapping (from model
defaults or caller options) it is lifted out of the request options and
combined with the explicit argument, which wins.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..base.interfaces import Provider
from ..base.models import Message, Model
from ..base.protocol import Protocol
from ..providers.data import VisionData
from .base import BaseRequest

VISION_OPTIONS_KEY = "vision_options"


class VisionRequest(BaseRequest):
    PROTOCOL = Protocol.VISION

    def __init__(
        self,
        provider: Provider,
        model: Model,
        messages: Sequence[Message],
        images: Sequence[str],
        vision_options: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(provider, model, options)
        self._messages: List[Message] = list(messages)
        self._images: List[str] = list(images)
        lifted = self._options.pop(VISION_OPTIONS_KEY, None)
        merged: Dict[str, Any] = dict(lifted) if isinstance(lifted, Mapping) else {}
        merged.update(vision_options or {})
        self._vision_options = merged

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def images(self) -> List[str]:
        return list(self._images)

    @property
    def vision_options(self) -> Dict[str, Any]:
        return dict(self._vision_options)

    def marshal(self) -> bytes:
        return self._provider.marshal(
            Protocol.VISION,
            VisionData(
                model=self._model.name,
                messages=list(self._messages),
                images=list(self._images),
                vision_options=dict(self._vision_options),
                options=dict(self._options),
            ),
        )


__all__ = ["VisionRequest"]

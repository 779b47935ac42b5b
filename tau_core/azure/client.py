"""Azure provider (deployment-routed cloud API).

Purpose:
        Drives Azure OpenAI style deployments. Requests are routed to
        ``{base_url}/deployments/{deployment}/...`` with an ``api-version``
        query parameter.

Configuration:
        ``options`` must carry ``deployment``, ``auth_type``, ``token`` and
        ``api_version``; construction fails with ``ProviderConfigError`` naming
        the first missing one. ``auth_type`` is ``api_key`` (``api-key``
        header) or ``bearer`` and is fixed for the provider's lifetime.

Streaming:
        Only ``data:`` lines are considered (``event:`` lines are skipped); a
        ``[DONE]`` payload terminates the stream.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import httpx

from ..base.errors import ErrorCode, ProviderConfigError, UnsupportedProtocolError
from ..base.protocol import Protocol
from ..providers.base import BaseProvider

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ProviderConfig

AUTH_API_KEY = "api_key"
AUTH_BEARER = "bearer"
REQUIRED_OPTIONS = ("deployment", "auth_type", "token", "api_version")

_ENDPOINTS: Dict[Protocol, str] = {
    Protocol.CHAT: "/chat/completions",
    Protocol.VISION: "/chat/completions",
    Protocol.TOOLS: "/chat/completions",
    Protocol.EMBEDDINGS: "/embeddings",
}


class AzureProvider(BaseProvider):
    """Deployment-routed cloud backend with API-key or bearer auth."""

    def __init__(self, name: str, base_url: str, options: Optional[Mapping[str, Any]] = None) -> None:
        opts = dict(options or {})
        values: Dict[str, str] = {}
        for key in REQUIRED_OPTIONS:
            value = opts.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ProviderConfigError(
                    code=ErrorCode.CONFIGURATION,
                    message=f"{key} is required for Azure provider",
                    provider=name,
                )
            values[key] = value.strip()
        if values["auth_type"] not in (AUTH_API_KEY, AUTH_BEARER):
            raise ProviderConfigError(
                code=ErrorCode.CONFIGURATION,
                message=f"auth_type must be '{AUTH_API_KEY}' or '{AUTH_BEARER}', got '{values['auth_type']}'",
                provider=name,
            )
        super().__init__(name, (base_url or "").rstrip("/"))
        self._deployment = values["deployment"]
        self._auth_type = values["auth_type"]
        self._token = values["token"]
        self._api_version = values["api_version"]

    @classmethod
    def from_config(cls, cfg: "ProviderConfig") -> "AzureProvider":
        return cls(cfg.name, cfg.base_url, cfg.options)

    @property
    def deployment(self) -> str:
        return self._deployment

    @property
    def api_version(self) -> str:
        return self._api_version

    @property
    def auth_type(self) -> str:
        return self._auth_type

    def endpoint(self, protocol: Protocol) -> str:
        path = _ENDPOINTS.get(Protocol(protocol))
        if path is None:  # pragma: no cover - every protocol is mapped
            raise UnsupportedProtocolError(
                code=ErrorCode.UNSUPPORTED,
                message=f"protocol {protocol} not supported by Azure",
                provider=self.name,
                phase="prepare",
            )
        return f"{self.base_url}/deployments/{self._deployment}{path}?api-version={self._api_version}"

    def set_headers(self, request: httpx.Request) -> None:
        if self._auth_type == AUTH_API_KEY:
            request.headers["api-key"] = self._token
        else:
            request.headers["Authorization"] = f"Bearer {self._token}"

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"AzureProvider(name={self.name!r}, base_url={self.base_url!r}, "
            f"deployment={self._deployment!r}, auth_type={self._auth_type!r})"
        )


__all__ = ["AzureProvider", "REQUIRED_OPTIONS"]

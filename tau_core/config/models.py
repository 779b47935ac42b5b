"""Pydantic configuration models.

Every model has a ``merge(other)`` returning a new instance: fields that
``other`` set explicitly and that carry a meaningful value (positive number,
non-empty string) win; option maps merge key by key; model capabilities merge
per protocol.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

from .defaults import (
    DEFAULT_AGENT_NAME,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_CONNECTION_POOL_SIZE,
    DEFAULT_CONNECTION_TIMEOUT_SECONDS,
    DEFAULT_INITIAL_BACKOFF_SECONDS,
    DEFAULT_JITTER,
    DEFAULT_MAX_BACKOFF_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PROVIDER_BASE_URL,
    DEFAULT_PROVIDER_NAME,
    DEFAULT_STREAM_BUFFER_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
)
from .duration import format_duration, parse_duration

Duration = Annotated[
    float,
    BeforeValidator(parse_duration),
    PlainSerializer(format_duration, return_type=str, when_used="json"),
]
"""Seconds; accepts numbers or strings like ``"500ms"``, ``"30s"``, ``"2m"``."""


def _explicit(model: BaseModel, field: str) -> bool:
    return field in model.model_fields_set


def _positive(model: BaseModel, field: str) -> bool:
    value = getattr(model, field)
    return _explicit(model, field) and value is not None and value > 0


def _non_empty(model: BaseModel, field: str) -> bool:
    return _explicit(model, field) and bool(getattr(model, field))


class RetryConfig(BaseModel):
    """Retry policy for atomic executions (streams are never retried)."""

    model_config = ConfigDict(extra="ignore")

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    initial_backoff: Duration = DEFAULT_INITIAL_BACKOFF_SECONDS
    max_backoff: Duration = DEFAULT_MAX_BACKOFF_SECONDS
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, gt=0)
    jitter: bool = DEFAULT_JITTER

    def merge(self, other: "RetryConfig") -> "RetryConfig":
        out = self.model_copy(deep=True)
        for field in ("max_retries", "initial_backoff", "max_backoff", "backoff_multiplier"):
            if _positive(other, field):
                setattr(out, field, getattr(other, field))
        if _explicit(other, "jitter"):
            out.jitter = other.jitter
        return out


class ClientConfig(BaseModel):
    """HTTP execution settings: timeouts, pool size, retry and stream buffering."""

    model_config = ConfigDict(extra="ignore")

    timeout: Duration = DEFAULT_TIMEOUT_SECONDS
    retry: RetryConfig = Field(default_factory=RetryConfig)
    connection_pool_size: int = Field(default=DEFAULT_CONNECTION_POOL_SIZE, ge=1)
    connection_timeout: Duration = DEFAULT_CONNECTION_TIMEOUT_SECONDS
    stream_buffer_size: int = Field(default=DEFAULT_STREAM_BUFFER_SIZE, ge=1)

    def merge(self, other: "ClientConfig") -> "ClientConfig":
        out = self.model_copy(deep=True)
        for field in ("timeout", "connection_pool_size", "connection_timeout", "stream_buffer_size"):
            if _positive(other, field):
                setattr(out, field, getattr(other, field))
        if _explicit(other, "retry"):
            out.retry = self.retry.merge(other.retry)
        return out


class ProviderConfig(BaseModel):
    """Provider name, endpoint and backend-specific options (auth, deployment...)."""

    model_config = ConfigDict(extra="ignore")

    name: str = DEFAULT_PROVIDER_NAME
    base_url: str = DEFAULT_PROVIDER_BASE_URL
    options: Dict[str, Any] = Field(default_factory=dict)

    def merge(self, other: "ProviderConfig") -> "ProviderConfig":
        out = self.model_copy(deep=True)
        for field in ("name", "base_url"):
            if _non_empty(other, field):
                setattr(out, field, getattr(other, field))
        if _explicit(other, "options"):
            out.options = {**self.options, **other.options}
        return out


class ModelConfig(BaseModel):
    """Model name plus per-protocol default options keyed by protocol name."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    capabilities: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def merge(self, other: "ModelConfig") -> "ModelConfig":
        out = self.model_copy(deep=True)
        if _non_empty(other, "name"):
            out.name = other.name
        for protocol, options in other.capabilities.items():
            merged = dict(out.capabilities.get(protocol) or {})
            merged.update(options or {})
            out.capabilities[protocol] = merged
        return out


class AgentConfig(BaseModel):
    """Complete agent configuration: identity, system prompt and the three sections."""

    model_config = ConfigDict(extra="ignore")

    name: str = DEFAULT_AGENT_NAME
    system_prompt: str = ""
    client: ClientConfig = Field(default_factory=ClientConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)

    def merge(self, other: "AgentConfig") -> "AgentConfig":
        out = self.model_copy(deep=True)
        for field in ("name", "system_prompt"):
            if _non_empty(other, field):
                setattr(out, field, getattr(other, field))
        if _explicit(other, "client"):
            out.client = self.client.merge(other.client)
        if _explicit(other, "provider"):
            out.provider = self.provider.merge(other.provider)
        if _explicit(other, "model"):
            out.model = self.model.merge(other.model)
        return out


__all__ = [
    "AgentConfig",
    "ClientConfig",
    "Duration",
    "ModelConfig",
    "ProviderConfig",
    "RetryConfig",
]

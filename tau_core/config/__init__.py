"""Unified configuration layer.

Goals
-----
* Typed (pydantic) models for agent, client, retry, provider and model settings.
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional config file (JSON or YAML) passed in or named by ``TAU_CONFIG_FILE``
    3. Environment variables ``TAU_PROVIDER_NAME``, ``TAU_PROVIDER_BASE_URL``,
       ``TAU_MODEL_NAME``
* Durations accept seconds or human strings (``"30s"``, ``"2m"``).

Config file example (YAML)::

    name: reviewer
    system_prompt: "You are a careful reviewer."
    client:
      timeout: 2m
      retry:
        max_retries: 5
        initial_backoff: 500ms
    provider:
      name: azure
      base_url: https://example.openai.azure.com/openai
      options:
        deployment: gpt-4o
        auth_type: api_key
        token: ${AZURE_API_KEY}
        api_version: 2024-08-01-preview
    model:
      name: gpt-4o
      capabilities:
        chat: {temperature: 0.2}

Public API
----------
* load_agent_config(path: str | None = None) -> AgentConfig
* parse_duration(value) -> float
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .defaults import ENV_CONFIG_FILE, ENV_MODEL_NAME, ENV_PROVIDER_BASE_URL, ENV_PROVIDER_NAME
from .duration import format_duration, parse_duration
from .models import AgentConfig, ClientConfig, Duration, ModelConfig, ProviderConfig, RetryConfig


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read, parsed or validated."""


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc
    text = os.path.expandvars(text)
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(text)
        else:
            # YAML is a superset of JSON, so unknown suffixes go through it too
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _env_overrides() -> AgentConfig:
    provider: Dict[str, Any] = {}
    model: Dict[str, Any] = {}
    if value := os.getenv(ENV_PROVIDER_NAME):
        provider["name"] = value
    if value := os.getenv(ENV_PROVIDER_BASE_URL):
        provider["base_url"] = value
    if value := os.getenv(ENV_MODEL_NAME):
        model["name"] = value
    data: Dict[str, Any] = {}
    if provider:
        data["provider"] = provider
    if model:
        data["model"] = model
    return AgentConfig.model_validate(data)


def load_agent_config(path: Optional[Union[str, os.PathLike]] = None) -> AgentConfig:
    """Return the merged agent configuration.

    Merge order (later wins): defaults -> config file -> environment.
    ``${VAR}`` references inside the file are expanded from the environment.

    Raises:
        ConfigError: when the file cannot be read, parsed or validated.
    """
    cfg = AgentConfig()
    file_path = path if path is not None else os.getenv(ENV_CONFIG_FILE)
    if file_path:
        data = _read_config_file(Path(file_path).expanduser())
        try:
            loaded = AgentConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"invalid config file {file_path}: {exc}") from exc
        cfg = cfg.merge(loaded)
    return cfg.merge(_env_overrides())


__all__ = [
    "AgentConfig",
    "ClientConfig",
    "ConfigError",
    "Duration",
    "ModelConfig",
    "ProviderConfig",
    "RetryConfig",
    "format_duration",
    "load_agent_config",
    "parse_duration",
]

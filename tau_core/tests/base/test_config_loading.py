from __future__ import annotations

import json

import pytest

from tau_core.config import (
    AgentConfig,
    ClientConfig,
    ConfigError,
    ModelConfig,
    ProviderConfig,
    RetryConfig,
    format_duration,
    load_agent_config,
    parse_duration,
)
from tau_core.config.defaults import ENV_CONFIG_FILE, ENV_MODEL_NAME, ENV_PROVIDER_BASE_URL, ENV_PROVIDER_NAME


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (ENV_CONFIG_FILE, ENV_MODEL_NAME, ENV_PROVIDER_BASE_URL, ENV_PROVIDER_NAME):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    "value, seconds",
    [
        (5, 5.0),
        (0.25, 0.25),
        ("30", 30.0),
        ("500ms", 0.5),
        ("30s", 30.0),
        ("2m", 120.0),
        ("1h30m", 5400.0),
        ("1.5s", 1.5),
        ("250us", 0.00025),
    ],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == pytest.approx(seconds)  # nosec B101 - asserts are appropriate in unit tests


@pytest.mark.parametrize("value", [-1, "-1s", "", "10 parsecs", "5x", True, None, [1]])
def test_parse_duration_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_format_duration():
    assert format_duration(0.5) == "500ms"  # nosec B101 - asserts are appropriate in unit tests
    assert format_duration(90) == "1m30s"  # nosec B101 - asserts are appropriate in unit tests
    assert format_duration(3600) == "1h"  # nosec B101 - asserts are appropriate in unit tests


def test_defaults():
    cfg = AgentConfig()
    assert cfg.provider.name == "ollama"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.provider.base_url == "http://localhost:11434"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.timeout == 120.0  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.connection_pool_size == 10  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.max_retries == 3  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.initial_backoff == 1.0  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.max_backoff == 30.0  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.jitter is True  # nosec B101 - asserts are appropriate in unit tests


def test_retry_merge_takes_positive_explicit_values():
    base = RetryConfig(max_retries=3, initial_backoff=1.0)
    merged = base.merge(RetryConfig(max_retries=0, initial_backoff="250ms"))
    assert merged.max_retries == 3  # nosec B101 - asserts are appropriate in unit tests
    assert merged.initial_backoff == 0.25  # nosec B101 - asserts are appropriate in unit tests
    assert merged.jitter is True  # nosec B101 - asserts are appropriate in unit tests
    assert base.merge(RetryConfig(jitter=False)).jitter is False  # nosec B101 - asserts are appropriate in unit tests


def test_client_merge_only_touches_set_fields():
    base = ClientConfig(timeout=60, retry=RetryConfig(max_retries=5))
    merged = base.merge(ClientConfig(connection_pool_size=4))
    assert merged.timeout == 60.0  # nosec B101 - asserts are appropriate in unit tests
    assert merged.connection_pool_size == 4  # nosec B101 - asserts are appropriate in unit tests
    assert merged.retry.max_retries == 5  # nosec B101 - asserts are appropriate in unit tests
    assert base.connection_pool_size == 10  # nosec B101 - asserts are appropriate in unit tests


def test_provider_and_model_merge_combine_maps():
    provider = ProviderConfig(options={"token": "a", "auth_type": "bearer"})
    merged = provider.merge(ProviderConfig(base_url="http://gpu:11434", options={"token": "b"}))
    assert merged.name == "ollama"  # nosec B101 - asserts are appropriate in unit tests
    assert merged.base_url == "http://gpu:11434"  # nosec B101 - asserts are appropriate in unit tests
    assert merged.options == {"token": "b", "auth_type": "bearer"}  # nosec B101 - asserts are appropriate in unit tests

    model = ModelConfig(name="llama3", capabilities={"chat": {"temperature": 0.1, "top_p": 0.9}})
    merged_model = model.merge(ModelConfig(capabilities={"chat": {"temperature": 0.5}, "embeddings": {}}))
    assert merged_model.name == "llama3"  # nosec B101 - asserts are appropriate in unit tests
    assert merged_model.capabilities["chat"] == {"temperature": 0.5, "top_p": 0.9}  # nosec B101 - asserts are appropriate in unit tests
    assert merged_model.capabilities["embeddings"] == {}  # nosec B101 - asserts are appropriate in unit tests


def test_load_yaml_file_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("AZURE_TEST_KEY", "secret-key")
    path = tmp_path / "agent.yaml"
    path.write_text(
        """
name: reviewer
system_prompt: You are a careful reviewer.
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
    token: ${AZURE_TEST_KEY}
    api_version: 2024-08-01-preview
model:
  name: gpt-4o
  capabilities:
    chat: {temperature: 0.2}
""",
        encoding="utf-8",
    )

    cfg = load_agent_config(path)

    assert cfg.name == "reviewer"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.system_prompt == "You are a careful reviewer."  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.timeout == 120.0  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.max_retries == 5  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.initial_backoff == 0.5  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.retry.max_backoff == 30.0  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.client.connection_pool_size == 10  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.provider.options["token"] == "secret-key"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.model.capabilities == {"chat": {"temperature": 0.2}}  # nosec B101 - asserts are appropriate in unit tests


def test_load_json_file_named_by_env_then_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "agent.json"
    path.write_text(json.dumps({"model": {"name": "from-file"}, "provider": {"base_url": "http://file:11434"}}), encoding="utf-8")
    monkeypatch.setenv(ENV_CONFIG_FILE, str(path))
    monkeypatch.setenv(ENV_MODEL_NAME, "from-env")

    cfg = load_agent_config()

    assert cfg.model.name == "from-env"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.provider.base_url == "http://file:11434"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.provider.name == "ollama"  # nosec B101 - asserts are appropriate in unit tests


def test_load_without_file_uses_defaults_and_env(monkeypatch):
    monkeypatch.setenv(ENV_PROVIDER_NAME, "azure")
    cfg = load_agent_config()
    assert cfg.provider.name == "azure"  # nosec B101 - asserts are appropriate in unit tests
    assert cfg.model.name == ""  # nosec B101 - asserts are appropriate in unit tests


def test_load_errors_are_config_errors(tmp_path):
    missing = tmp_path / "missing.yaml"
    with pytest.raises(ConfigError):
        load_agent_config(missing)

    broken = tmp_path / "broken.yaml"
    broken.write_text("client: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_agent_config(broken)

    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_agent_config(not_mapping)

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text("client:\n  timeout: soon\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_agent_config(invalid)


def test_durations_serialize_as_strings_in_json_mode():
    dumped = ClientConfig(timeout="90s").model_dump(mode="json")
    assert dumped["timeout"] == "1m30s"  # nosec B101 - asserts are appropriate in unit tests
    assert ClientConfig(timeout="90s").model_dump()["timeout"] == 90.0  # nosec B101 - asserts are appropriate in unit tests

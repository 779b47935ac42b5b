"""tau_core.config.defaults
=========================

Small, stable default values for the configuration models. Plain constants
only; no I/O and no imports from other tau_core packages.
"""

from __future__ import annotations

# ---- Agent ----
DEFAULT_AGENT_NAME = "default-agent"

# ---- Provider ----
DEFAULT_PROVIDER_NAME = "ollama"
DEFAULT_PROVIDER_BASE_URL = "http://localhost:11434"

# ---- Client (seconds) ----
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_CONNECTION_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECTION_POOL_SIZE = 10
# Chunks the decode worker may buffer ahead of the consumer.
DEFAULT_STREAM_BUFFER_SIZE = 1

# ---- Retry ----
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF_SECONDS = 1.0
DEFAULT_MAX_BACKOFF_SECONDS = 30.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_JITTER = True

# ---- Environment variables ----
ENV_CONFIG_FILE = "TAU_CONFIG_FILE"
ENV_PROVIDER_NAME = "TAU_PROVIDER_NAME"
ENV_PROVIDER_BASE_URL = "TAU_PROVIDER_BASE_URL"
ENV_MODEL_NAME = "TAU_MODEL_NAME"

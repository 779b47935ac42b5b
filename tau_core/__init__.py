"""tau_core: multi-protocol, multi-provider LLM execution client.

Typical use::

    from tau_core import Agent, load_agent_config

    async with Agent(load_agent_config("agent.yaml")) as agent:
        reply = await agent.chat("Hello")
        print(reply.content())
"""

from .agent import Agent, AgentError
from .base import (
    CancellationToken,
    CancelledError,
    DeadlineExceededError,
    ErrorCode,
    HTTPStatusError,
    Message,
    Model,
    Protocol,
    ProviderError,
    RetryExhaustedError,
    ToolDefinition,
)
from .base.factory import ProviderFactory, UnknownProviderError
from .base.streaming import ChunkStream
from .client import ExecutionClient
from .config import AgentConfig, ClientConfig, ModelConfig, ProviderConfig, RetryConfig, load_agent_config
from .request import ChatRequest, EmbeddingsRequest, ToolsRequest, VisionRequest

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentError",
    "CancellationToken",
    "CancelledError",
    "ChatRequest",
    "ChunkStream",
    "ClientConfig",
    "DeadlineExceededError",
    "EmbeddingsRequest",
    "ErrorCode",
    "ExecutionClient",
    "HTTPStatusError",
    "Message",
    "Model",
    "ModelConfig",
    "Protocol",
    "ProviderConfig",
    "ProviderError",
    "ProviderFactory",
    "RetryConfig",
    "RetryExhaustedError",
    "ToolDefinition",
    "ToolsRequest",
    "UnknownProviderError",
    "VisionRequest",
    "__version__",
    "load_agent_config",
]

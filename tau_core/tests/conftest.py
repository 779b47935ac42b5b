"""Pytest fixtures shared by the tau_core test suite.

Log capture attaches to the shared ``tau_core`` logger directly since it
does not propagate to the root logger (``caplog`` never sees its records).
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, Iterator, List, Optional

import httpx
import pytest

from tau_core.base.logging import get_logger
from tau_core.base.models import Message, Model
from tau_core.client import ExecutionClient
from tau_core.config import ClientConfig
from tau_core.ollama.client import OllamaProvider
from tau_core.tests.utils import fast_client_config


class _ListHandler(logging.Handler):
    """Collect records and expose the JSON events among them."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def events(self) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for rec in self.records:
            msg = rec.getMessage()
            if msg.startswith("{"):
                out.append(json.loads(msg))
        return out

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("event") == event]


@pytest.fixture()
def log_capture() -> Iterator[_ListHandler]:
    logger = get_logger()
    handler = _ListHandler()
    previous = logger.level
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


@pytest.fixture()
def provider() -> OllamaProvider:
    return OllamaProvider("ollama", "http://ollama.test")


@pytest.fixture()
def model() -> Model:
    return Model(name="llama3")


@pytest.fixture()
def messages() -> List[Message]:
    return [Message("user", "hello")]


@pytest.fixture()
async def make_client() -> AsyncIterator[Callable[..., ExecutionClient]]:
    """Build execution clients over a mock transport; pools are closed afterwards."""
    created: List[ExecutionClient] = []

    def _make(transport: httpx.AsyncBaseTransport, config: Optional[ClientConfig] = None) -> ExecutionClient:
        client = ExecutionClient(config if config is not None else fast_client_config(), transport=transport)
        created.append(client)
        return client

    yield _make
    for client in created:
        await client.aclose()

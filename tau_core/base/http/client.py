"""Async HTTP client construction.

Purpose:
    Build the ``httpx.AsyncClient`` owned by one ``ExecutionClient``. Each
    execution client has exactly one connection pool; its size, keep-alive
    and timeouts derive from :class:`tau_core.config.ClientConfig`.

External dependencies:
    - ``httpx`` for the async client, timeouts and pool limits.

Timeout strategy:
    - ``ClientConfig.timeout`` bounds every read/write/pool wait.
    - ``ClientConfig.connection_timeout`` bounds connection establishment.
    - Streaming responses use the same client; the read timeout applies per
      chunk read, not to the whole stream.

Lifecycle:
    - The owning ``ExecutionClient`` closes the client in ``aclose``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:  # pragma: no cover
    from ...config import ClientConfig


def build_timeout(cfg: "ClientConfig") -> httpx.Timeout:
    """Return the ``httpx.Timeout`` matching ``cfg`` (``None`` fields disable a bound)."""
    total = cfg.timeout if cfg.timeout and cfg.timeout > 0 else None
    connect = cfg.connection_timeout if cfg.connection_timeout and cfg.connection_timeout > 0 else total
    return httpx.Timeout(total, connect=connect)


def build_limits(cfg: "ClientConfig") -> httpx.Limits:
    """Return pool limits; keep-alive connections match the pool size."""
    size = max(1, cfg.connection_pool_size)
    return httpx.Limits(max_connections=size, max_keepalive_connections=size)


def build_async_client(
    cfg: "ClientConfig",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the pooled ``httpx.AsyncClient`` for one execution client.

    Parameters:
        cfg: Client configuration supplying timeouts and pool size.
        transport: Optional transport override (``httpx.MockTransport`` in
            tests). When given, pool limits are owned by the transport.
    """
    if transport is not None:
        return httpx.AsyncClient(transport=transport, timeout=build_timeout(cfg))
    return httpx.AsyncClient(timeout=build_timeout(cfg), limits=build_limits(cfg))


__all__ = ["build_async_client", "build_limits", "build_timeout"]

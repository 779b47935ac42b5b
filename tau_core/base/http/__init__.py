"""HTTP client construction for the execution client."""

from .client import build_async_client

__all__ = ["build_async_client"]

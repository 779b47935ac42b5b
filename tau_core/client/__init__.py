"""Execution client: atomic and streaming request execution."""

from .client import ExecutionClient

__all__ = ["ExecutionClient"]

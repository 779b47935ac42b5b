"""Ollama (local OpenAI-compatible) provider."""

from .client import OllamaProvider, normalize_base_url

__all__ = ["OllamaProvider", "normalize_base_url"]

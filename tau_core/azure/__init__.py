"""Azure (deployment-routed cloud) provider."""

from .client import AzureProvider

__all__ = ["AzureProvider"]

"""Concrete platform clients."""

from .kubectl_client import KubectlPlatformClient
from .in_memory import InMemoryPlatform

__all__ = ["KubectlPlatformClient", "InMemoryPlatform"]

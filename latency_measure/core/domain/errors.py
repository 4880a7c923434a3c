"""Errors raised by platform collaborators and the engine."""

from __future__ import annotations


class PlatformError(Exception):
    """Base class for any failed platform lookup."""

    def __init__(self, kind: str, name: str, namespace: str, detail: str = ""):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self.detail = detail
        super().__init__(f"{kind} {namespace}/{name}: {detail}" if detail else f"{kind} {namespace}/{name}")


class PlatformNotFoundError(PlatformError):
    """The requested object does not exist."""


class PlatformLookupError(PlatformError):
    """Any other lookup failure (transport, timeout, undecodable response)."""


class NoTargetsError(ValueError):
    """Raised when there is nothing to measure."""

    def __init__(self, message: str = "no service found to measure"):
        super().__init__(message)

"""
Custom exceptions for cachelink.
"""

from __future__ import annotations

from typing import Optional


class CacheLinkError(Exception):
    """Base exception for all cachelink errors."""
    pass


class ReadMissError(CacheLinkError):
    """Raised by the store when referenced data is absent or incomplete."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"Read miss{f' at {path}' if path else ''}: {message}")


class FragmentNotFoundError(CacheLinkError):
    """Raised when a fragment spread names an undefined fragment."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No fragment named {name}.")


class CacheConfigError(CacheLinkError):
    """Raised when link configuration or type declarations are invalid."""
    pass


class TransportError(CacheLinkError):
    """Raised when the GraphQL endpoint call fails."""

    def __init__(self, endpoint: str, status_code: int, message: str):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"Endpoint '{endpoint}' returned {status_code}: {message}")


class LinkError(CacheLinkError):
    """Raised when a link chain cannot forward an operation."""
    pass

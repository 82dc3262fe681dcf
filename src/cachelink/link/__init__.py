"""
Link module - transport chain stages.
"""

from __future__ import annotations

from .base import Forward, Link, execute
from .cache_query import CacheQueryLink
from .http import HttpLink

__all__ = [
    "Forward",
    "Link",
    "execute",
    "CacheQueryLink",
    "HttpLink",
]

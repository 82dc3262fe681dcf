"""
API module - FastAPI endpoints.
"""

from __future__ import annotations

from .router import create_list_router, get_link, router, set_link

__all__ = [
    "router",
    "set_link",
    "get_link",
    "create_list_router",
]

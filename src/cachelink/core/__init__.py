"""
Core module - definitions, documents, configuration and errors.
"""

from __future__ import annotations

from .config import (
    CacheLinkConfig,
    CacheLinkSettings,
    default_cache_read_key,
    default_cache_remove_key,
    default_connection_typename,
    load_settings,
)
from .defs import (
    CacheableType,
    CacheableTypeMap,
    ConnectionRecord,
    EntityReference,
    JoinSpec,
)
from .errors import (
    CacheConfigError,
    CacheLinkError,
    FragmentNotFoundError,
    LinkError,
    ReadMissError,
    TransportError,
)
from .query_types import GraphQLRequest, GraphQLResponse, Operation

__all__ = [
    # Config
    "CacheLinkConfig",
    "CacheLinkSettings",
    "default_cache_read_key",
    "default_cache_remove_key",
    "default_connection_typename",
    "load_settings",
    # Definitions
    "CacheableType",
    "CacheableTypeMap",
    "ConnectionRecord",
    "EntityReference",
    "JoinSpec",
    # Errors
    "CacheLinkError",
    "ReadMissError",
    "FragmentNotFoundError",
    "CacheConfigError",
    "TransportError",
    "LinkError",
    # Query types
    "Operation",
    "GraphQLRequest",
    "GraphQLResponse",
]

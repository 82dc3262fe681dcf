"""
cachelink - list caches reconciled from GraphQL results.

Keeps one ordered "all entities of type T" list per declared type, fed by
every operation result that passes through the link chain, and serves those
lists through read and remove resolvers.

Usage:
    from cachelink import CacheQueryLink, HttpLink, NormalizedStore, Operation, execute

    store = NormalizedStore()
    link = CacheQueryLink(store, ["fragment TaskFields on Task { id title }"])

    for response in execute([link, HttpLink(url)], Operation.create("{ items { id title } }")):
        ...

    link.query_resolvers()["allTask"]()
"""

from __future__ import annotations

from .api import create_list_router
from .core import (
    CacheableType,
    CacheableTypeMap,
    CacheConfigError,
    CacheLinkConfig,
    CacheLinkError,
    CacheLinkSettings,
    ConnectionRecord,
    EntityReference,
    FragmentNotFoundError,
    GraphQLRequest,
    GraphQLResponse,
    JoinSpec,
    LinkError,
    Operation,
    ReadMissError,
    TransportError,
    load_settings,
)
from .link import CacheQueryLink, HttpLink, Link, execute
from .runtime import (
    ConnectionSynchronizer,
    EntityCollector,
    RemovalResolver,
    ResolverRegistry,
    WalkContext,
    create_array_join_connection,
    merge_connection,
    traverse_selections,
)
from .store import MemoryRecordBackend, NormalizedStore, RecordBackend, RedisRecordBackend, Store

__version__ = "0.1.0"

__all__ = [
    # API
    "create_list_router",
    # Config
    "CacheLinkConfig",
    "CacheLinkSettings",
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
    # Links
    "Link",
    "execute",
    "CacheQueryLink",
    "HttpLink",
    # Runtime
    "WalkContext",
    "traverse_selections",
    "EntityCollector",
    "ConnectionSynchronizer",
    "merge_connection",
    "RemovalResolver",
    "ResolverRegistry",
    "create_array_join_connection",
    # Store
    "Store",
    "RecordBackend",
    "NormalizedStore",
    "MemoryRecordBackend",
    "RedisRecordBackend",
]

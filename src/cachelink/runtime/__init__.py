"""
Runtime module - reconciliation pipeline and list resolvers.
"""

from __future__ import annotations

from .collector import EntityCollector
from .connections import ConnectionStore
from .join import create_array_join_connection
from .locks import TypeLocks
from .registry import ResolverRegistry
from .removal import RemovalResolver, cast_id_set
from .synchronizer import ConnectionSynchronizer, merge_connection
from .walker import ValueKind, WalkContext, classify_value, lookup_fragment, traverse_selections

__all__ = [
    "EntityCollector",
    "ConnectionStore",
    "TypeLocks",
    "ValueKind",
    "WalkContext",
    "classify_value",
    "lookup_fragment",
    "traverse_selections",
    "ConnectionSynchronizer",
    "merge_connection",
    "RemovalResolver",
    "cast_id_set",
    "ResolverRegistry",
    "create_array_join_connection",
]

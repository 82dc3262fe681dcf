"""
Store module - normalized cache and its record backends.
"""

from __future__ import annotations

from .backends import MemoryRecordBackend, RedisRecordBackend
from .base import RecordBackend, Store
from .normalized import (
    ROOT_MUTATION,
    ROOT_QUERY,
    ROOT_SUBSCRIPTION,
    NormalizedStore,
    default_data_id_from_object,
)

__all__ = [
    "Store",
    "RecordBackend",
    "NormalizedStore",
    "MemoryRecordBackend",
    "RedisRecordBackend",
    "ROOT_QUERY",
    "ROOT_MUTATION",
    "ROOT_SUBSCRIPTION",
    "default_data_id_from_object",
]

"""
Record backends for the normalized store.

- MemoryRecordBackend: process-local dict
- RedisRecordBackend: one JSON string per record in Redis
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Iterator, Optional

import redis

from .base import RecordBackend

logger = logging.getLogger(__name__)


class MemoryRecordBackend(RecordBackend):
    """
    In-process record storage.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self, records: Optional[dict[str, dict[str, Any]]] = None):
        self._records: dict[str, dict[str, Any]] = copy.deepcopy(records) if records else {}

    def get(self, key: str) -> Optional[dict[str, Any]]:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: dict[str, Any]) -> None:
        self._records[key] = copy.deepcopy(record)

    def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        return iter(list(self._records))

    def clear(self) -> None:
        self._records.clear()


class RedisRecordBackend(RecordBackend):
    """
    Redis record storage.

    Usage:
        backend = RedisRecordBackend.from_url("redis://localhost:6379/0")
        store = NormalizedStore(backend)

    Creates keys:
    - cachelink:ROOT_QUERY
    - cachelink:Task:1
    """

    def __init__(self, client: redis.Redis, prefix: str = "cachelink"):
        """
        Initialize backend.

        Args:
            client: Redis client created with decode_responses=True
            prefix: Key prefix
        """
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = "cachelink") -> "RedisRecordBackend":
        """Connect to Redis by URL."""
        logger.info(f"Connecting record backend to Redis: {redis_url}")
        client = redis.Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        return cls(client, prefix=prefix)

    def _make_key(self, key: str) -> str:
        """Build full Redis key with prefix"""
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[dict[str, Any]]:
        payload = self.client.get(self._make_key(key))
        if payload is None:
            return None
        return json.loads(payload)

    def set(self, key: str, record: dict[str, Any]) -> None:
        payload = json.dumps(record, ensure_ascii=False, default=str)
        self.client.set(self._make_key(key), payload)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(self._make_key(key)))

    def keys(self) -> Iterator[str]:
        offset = len(self.prefix) + 1
        for key in self.client.scan_iter(match=self._make_key("*")):
            yield key[offset:]

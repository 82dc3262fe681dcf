"""
Entity collector - accumulates list-eligible references found by the walker.
"""

from __future__ import annotations

from typing import Iterator

from ..core.defs import EntityReference


class EntityCollector:
    """
    typename -> cache key -> EntityReference.

    The cache key enforces identity uniqueness; the first time a key is
    seen fixes its position within the type's bucket.

    Usage:
        collector = EntityCollector()
        collector.add("Task", "Task:1", EntityReference("1", "Task", "Task:1"))
        collector.references("Task")  # [EntityReference(id='1', ...)]
    """

    def __init__(self):
        self._buckets: dict[str, dict[str, EntityReference]] = {}

    def add(self, typename: str, cache_key: str, reference: EntityReference) -> bool:
        """Add a reference. Returns False when the identity was already collected."""
        bucket = self._buckets.setdefault(typename, {})
        if cache_key in bucket:
            return False
        bucket[cache_key] = reference
        return True

    def typenames(self) -> list[str]:
        return list(self._buckets)

    def references(self, typename: str) -> list[EntityReference]:
        return list(self._buckets.get(typename, {}).values())

    def cache_keys(self, typename: str) -> list[str]:
        return list(self._buckets.get(typename, {}))

    def merge(self, other: "EntityCollector") -> None:
        for typename in other.typenames():
            for cache_key, reference in other._buckets[typename].items():
                self.add(typename, cache_key, reference)

    def __contains__(self, typename: object) -> bool:
        return typename in self._buckets

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __bool__(self) -> bool:
        return bool(self._buckets)

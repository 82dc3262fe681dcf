"""
Removal resolver - drops entities from a type's list and evicts their records.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Union

from ..core.defs import CacheableType
from .connections import ConnectionStore
from .locks import TypeLocks

logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]


def cast_id_set(ids: Union[None, str, int, Iterable[Any]]) -> set[str]:
    """
    Normalize a single id or a collection of ids to a set of strings.

    GraphQL IDs travel as strings, so 1 and "1" name the same entity.
    """
    if ids is None:
        return set()
    if isinstance(ids, (str, bytes, int)):
        ids = [ids]
    return {str(entity_id) for entity_id in ids if entity_id is not None}


class RemovalResolver:
    """
    Removes ids from a connection record.

    Usage:
        removal = RemovalResolver(connections, locks)
        removal.remove("Task", {"1"})   # True
        removal.remove("Task", set())   # False, nothing touched
    """

    def __init__(self, connections: ConnectionStore, locks: Optional[TypeLocks] = None):
        self.connections = connections
        self.locks = locks or TypeLocks(enabled=False)

    def remove(self, typename: str, ids: Union[None, str, int, Iterable[Any]]) -> bool:
        """
        Remove entities from the list for a type.

        Returns False without side effects when no ids are given or no
        non-empty list is cached. Otherwise rewrites the list without the ids,
        evicts every id's entity record (listed or not) and returns True.
        """
        id_set = cast_id_set(ids)
        if not id_set:
            return False

        store = self.connections.store
        with self.locks.hold(typename):
            previous = self.connections.read_references(typename)
            if previous is None or previous.total_count < 1:
                return False

            nodes = [node for node in previous.nodes if str(node.id) not in id_set]
            self.connections.write(typename, previous.with_nodes(nodes))

            for entity_id in sorted(id_set):
                cache_key = store.identify({"__typename": typename, "id": entity_id})
                if cache_key:
                    store.evict(cache_key)

        logger.info(
            f"Removed {previous.total_count - len(nodes)} of {len(id_set)} {typename} id(s) "
            f"from {self.connections.config.read_key(typename)}"
        )
        return True

    def resolver(self, cacheable: CacheableType) -> Resolver:
        """Build a remove resolver reading the ids from args["id"]."""
        typename = cacheable.typename

        def resolve_remove(root_value: Any = None, args: Optional[dict] = None, context: Any = None, info: Any = None) -> bool:
            return self.remove(typename, (args or {}).get("id"))

        return resolve_remove

"""
Connection synchronizer - merges collected references into per-type lists.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..core.defs import ConnectionRecord, EntityReference
from .collector import EntityCollector
from .connections import ConnectionStore
from .locks import TypeLocks

logger = logging.getLogger(__name__)


def merge_connection(
    previous: Optional[ConnectionRecord],
    references: Iterable[EntityReference],
    typename: Optional[str] = None,
    cache_node_id: Optional[str] = None,
) -> ConnectionRecord:
    """
    Merge new references into a previous list.

    Previous nodes keep their positions; unseen references are appended in
    the order given. Identity is the reference's cache key, as in the
    collector, so identities not derived from `id` stay distinct.

    Args:
        previous: Stored record, or None for a type with no list yet
        references: Newly observed references
        typename: __typename of the list record itself
        cache_node_id: Handle for a new record (kept from previous when set)
    """
    previous_nodes = list(previous.nodes) if previous is not None else []
    seen = {node.cache_key for node in previous_nodes}
    merged = list(previous_nodes)
    for reference in references:
        if reference.cache_key in seen:
            continue
        seen.add(reference.cache_key)
        merged.append(reference)

    if previous is not None and previous.cache_node_id:
        cache_node_id = previous.cache_node_id
    return ConnectionRecord.build(nodes=merged, typename=typename, cache_node_id=cache_node_id)


class ConnectionSynchronizer:
    """
    Writes collected entities into their type's connection record.

    Each touched type is read, merged and overwritten as a whole record.

    Usage:
        synchronizer = ConnectionSynchronizer(connections, locks)
        records = synchronizer.synchronize(collector)
        records["Task"].total_count
    """

    def __init__(self, connections: ConnectionStore, locks: Optional[TypeLocks] = None):
        self.connections = connections
        self.locks = locks or TypeLocks(enabled=False)

    def synchronize(self, collector: EntityCollector) -> dict[str, ConnectionRecord]:
        records: dict[str, ConnectionRecord] = {}
        config = self.connections.config

        for typename in collector.typenames():
            with self.locks.hold(typename):
                previous = self.connections.read_references(typename)
                record = merge_connection(
                    previous,
                    collector.references(typename),
                    typename=config.connection_type(typename),
                    cache_node_id=config.read_key(typename),
                )
                self.connections.write(typename, record)

            added = record.total_count - (previous.total_count if previous else 0)
            if added:
                logger.debug(f"Added {added} {typename} node(s) to {config.read_key(typename)}")
            records[typename] = record

        return records

"""
Connection record access - reading and writing "all entities of type T" lists.

Lists live on the root record under their read key:

    ROOT_QUERY.allTask = {
        "__typename": "AllTaskConnection",
        "__cacheNodeId": "allTask",
        "totalCount": 2,
        "nodes": [<ref Task:1>, <ref Task:2>],
    }
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from graphql import DocumentNode, parse, print_ast

from ..core.config import CacheLinkConfig
from ..core.defs import CacheableType, ConnectionRecord, EntityReference
from ..core.documents import get_fragment_definitions
from ..core.errors import ReadMissError
from ..store.base import Store

logger = logging.getLogger(__name__)


class ConnectionStore:
    """
    Reads and writes connection records through a Store.

    Two read shapes:
    - read_references: nodes as EntityReference values (for merging/removal)
    - read_nodes: nodes materialized through the declared fragment (for resolvers)
    """

    def __init__(self, store: Store, config: CacheLinkConfig):
        self.store = store
        self.config = config

    def empty(self, typename: str) -> ConnectionRecord:
        """Default record for a type with nothing cached yet."""
        return ConnectionRecord.build(
            nodes=[],
            typename=self.config.connection_type(typename),
            cache_node_id=self.config.read_key(typename),
        )

    def _references_query(self, read_key: str) -> DocumentNode:
        return parse(
            f"query ReadConnectionReferences {{ "
            f"result: {read_key} {{ __typename __cacheNodeId totalCount nodes }} }}"
        )

    def _nodes_query(self, read_key: str, cacheable: CacheableType) -> DocumentNode:
        fragments = "\n".join(
            print_ast(fragment) for fragment in get_fragment_definitions(cacheable.document)
        )
        return parse(
            f"query ReadConnectionNodes {{ "
            f"result: {read_key} {{ __typename __cacheNodeId totalCount "
            f"nodes {{ ...{cacheable.fragment_name} }} }} }}\n{fragments}"
        )

    def read_references(self, typename: str) -> Optional[ConnectionRecord]:
        """
        Read the stored list for a type with nodes as references.

        Returns None when no list is cached (read miss).
        """
        read_key = self.config.read_key(typename)
        try:
            data = self.store.read_query(self._references_query(read_key))
        except ReadMissError as e:
            logger.debug(f"No cached list for {typename}: {e}")
            return None

        result = data.get("result")
        if result is None:
            return None
        record = ConnectionRecord.from_data(result)
        references = [
            reference
            for reference in (self._as_reference(node, typename) for node in record.nodes)
            if reference is not None
        ]
        return record.with_nodes(references)

    def read_nodes(self, cacheable: CacheableType) -> ConnectionRecord:
        """
        Read the stored list for a type with nodes materialized.

        Returns an empty record on read miss.
        """
        typename = cacheable.typename
        read_key = self.config.read_key(typename)
        try:
            data = self.store.read_query(self._nodes_query(read_key, cacheable))
        except ReadMissError as e:
            logger.debug(f"No readable list for {typename}: {e}")
            return self.empty(typename)

        result = data.get("result")
        if result is None:
            return self.empty(typename)
        return ConnectionRecord.from_data(result)

    def write(self, typename: str, record: ConnectionRecord) -> None:
        """Overwrite the whole list record for a type."""
        read_key = self.config.read_key(typename)
        self.store.write_data({read_key: record.to_data()})
        logger.debug(f"Wrote {read_key} with {record.total_count} nodes")

    def _as_reference(self, node: Any, typename: str) -> Optional[EntityReference]:
        """Stored nodes are references; plain entity dicts are re-identified."""
        if isinstance(node, EntityReference):
            return node
        if isinstance(node, dict) and node.get("id") is not None:
            node_typename = node.get("__typename") or typename
            cache_key = self.store.identify({"__typename": node_typename, "id": node["id"]})
            if cache_key:
                return EntityReference(id=node["id"], typename=node_typename, cache_key=cache_key)
        logger.debug(f"Dropping unrecognized node in {typename} list: {node!r}")
        return None

"""
Cache query link - keeps list caches in step with every operation result.

The operation is forwarded with __typename selected on every object, so
results can be identified. For each response with data:
1. Write the result into the normalized store (unless disabled)
2. Walk the result against the operation's selection set
3. Merge the collected entities into their types' connection records

Only then is the response passed on. Errors from the rest of the chain are
not caught here.

Usage:
    store = NormalizedStore()
    link = CacheQueryLink(store, fragment_type_defs=[
        "fragment TaskFields on Task { id title }",
    ])

    for response in execute([link, HttpLink(url)], Operation.create(query)):
        ...

    link.query_resolvers()["allTask"]()   # {"totalCount": 2, "nodes": [...]}
    link.mutation_resolvers()["removeTask"](None, {"id": "1"})
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from graphql import DocumentNode

from ..core.config import CacheLinkConfig, CacheLinkSettings
from ..core.defs import CacheableTypeMap, ConnectionRecord, JoinSpec
from ..core.documents import create_fragment_map, get_fragment_definitions, get_operation_definition
from ..core.errors import LinkError
from ..core.query_types import GraphQLResponse, Operation
from ..runtime.collector import EntityCollector
from ..runtime.connections import ConnectionStore
from ..runtime.join import create_array_join_connection
from ..runtime.locks import TypeLocks
from ..runtime.registry import ResolverRegistry
from ..runtime.removal import RemovalResolver
from ..runtime.synchronizer import ConnectionSynchronizer
from ..runtime.walker import WalkContext, traverse_selections
from ..store.backends import MemoryRecordBackend, RedisRecordBackend
from ..store.base import Store
from ..store.normalized import NormalizedStore
from .base import Forward, Link

logger = logging.getLogger(__name__)


class CacheQueryLink(Link):
    """Reconciles list caches with results flowing back through the chain."""

    def __init__(
        self,
        store: Store,
        fragment_type_defs: Iterable[Union[str, DocumentNode]] = (),
        config: Optional[CacheLinkConfig] = None,
    ):
        """
        Initialize link.

        Args:
            store: Normalized cache the lists live in
            fragment_type_defs: One fragment document per cacheable type
            config: Key naming and behaviour options
        """
        self.store = store
        self.config = config or CacheLinkConfig()
        self.cacheable_types = CacheableTypeMap.from_documents(
            fragment_type_defs,
            transform=store.transform_document,
        )

        self.locks = TypeLocks(enabled=self.config.serialize_writes)
        self.connections = ConnectionStore(store, self.config)
        self.synchronizer = ConnectionSynchronizer(self.connections, self.locks)
        self.removal = RemovalResolver(self.connections, self.locks)
        self.registry = ResolverRegistry(self.connections, self.cacheable_types, self.removal)

    @classmethod
    def from_settings(cls, settings: CacheLinkSettings, store: Optional[Store] = None) -> "CacheQueryLink":
        """Build a link from loaded settings; Redis-backed when a URL is set."""
        if store is None:
            if settings.redis_url:
                backend = RedisRecordBackend.from_url(settings.redis_url, prefix=settings.redis_prefix)
            else:
                backend = MemoryRecordBackend()
            store = NormalizedStore(backend)
        return cls(store, settings.fragments, settings.config)

    # === Link ===

    def request(self, operation: Operation, forward: Optional[Forward] = None) -> Iterator[GraphQLResponse]:
        if forward is None:
            raise LinkError("CacheQueryLink must be followed by another link")

        operation = replace(operation, query=self.store.transform_document(operation.query))
        for response in forward(operation):
            if response.data is not None:
                self.reconcile(operation, response.data)
            yield response

    # === Reconciliation ===

    def reconcile(self, operation: Operation, data: Mapping[str, Any]) -> dict[str, ConnectionRecord]:
        """
        Bring list caches up to date with one operation result.

        Returns the records written, by entity type name.
        """
        document = self.store.transform_document(operation.query)
        if self.config.write_results:
            self.store.write_query(document, data, operation.variables)

        collector = self.collect(document, data, operation.variables)
        if not collector:
            return {}

        records = self.synchronizer.synchronize(collector)
        logger.debug(
            f"Reconciled {operation.operation_name or 'anonymous'} operation: "
            + ", ".join(f"{typename}={record.total_count}" for typename, record in records.items())
        )
        return records

    def collect(
        self,
        document: DocumentNode,
        data: Mapping[str, Any],
        variables: Optional[dict[str, Any]] = None,
    ) -> EntityCollector:
        """Walk a (transformed) document against a result."""
        operation_definition = get_operation_definition(document)
        context = WalkContext(
            store=self.store,
            cacheable_types=self.cacheable_types,
            fragment_map=create_fragment_map(get_fragment_definitions(document)),
            variables=dict(variables or {}),
        )
        if operation_definition is not None:
            traverse_selections(operation_definition.selection_set, data, context)
        return context.collector

    # === Resolvers ===

    def query_resolvers(self):
        return self.registry.query_resolvers()

    def mutation_resolvers(self):
        return self.registry.mutation_resolvers()

    def read_nodes_on_type(self, typename: str) -> Optional[ConnectionRecord]:
        return self.registry.read_nodes_on_type(typename)

    def remove(self, typename: str, ids: Any) -> bool:
        return self.removal.remove(typename, ids)

    def create_array_join_connection(self, typename: str, join_item: Union[JoinSpec, Mapping[str, Any]]):
        if not isinstance(join_item, JoinSpec):
            join_item = JoinSpec(**join_item)
        return create_array_join_connection(self.registry, typename, join_item)

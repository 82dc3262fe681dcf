"""
Resolver registry - list read and remove resolvers for every cacheable type.

Usage:
    registry = ResolverRegistry(connections, cacheable_types, removal)

    registry.query_resolvers()      # {"allTask": resolve_all, ...}
    registry.mutation_resolvers()   # {"removeTask": resolve_remove, ...}

Resolvers take (root_value, args, context, info) like any GraphQL resolver.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..core.defs import CacheableType, CacheableTypeMap, ConnectionRecord
from ..core.errors import CacheConfigError
from .connections import ConnectionStore
from .removal import RemovalResolver

logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]


class ResolverRegistry:
    """Builds read and remove resolver maps keyed by configured root field names."""

    def __init__(
        self,
        connections: ConnectionStore,
        cacheable_types: CacheableTypeMap,
        removal: RemovalResolver,
    ):
        self.connections = connections
        self.cacheable_types = cacheable_types
        self.removal = removal
        for declaration in cacheable_types.skipped:
            logger.debug(
                f"Skipping declaration without type or fragment name: "
                f"typename={declaration.typename!r} fragment={declaration.fragment_name!r}"
            )

    @property
    def config(self):
        return self.connections.config

    def get_fragment_by_typename(self, typename: str) -> Optional[CacheableType]:
        return self.cacheable_types.get(typename)

    def read_nodes_on_type(self, typename: str) -> Optional[ConnectionRecord]:
        """Materialized list for a type; None when the type is not declared."""
        cacheable = self.get_fragment_by_typename(typename)
        if cacheable is None:
            return None
        return self.connections.read_nodes(cacheable)

    def _read_resolver(self, cacheable: CacheableType) -> Resolver:
        def resolve_all(root_value: Any = None, args: Optional[dict] = None, context: Any = None, info: Any = None) -> dict[str, Any]:
            return self.connections.read_nodes(cacheable).to_data()

        return resolve_all

    def _build(self, key_function: Callable[[str], str], factory: Callable[[CacheableType], Resolver]) -> dict[str, Resolver]:
        resolvers: dict[str, Resolver] = {}
        for cacheable in self.cacheable_types:
            key = key_function(cacheable.typename)
            if key in resolvers:
                raise CacheConfigError(f"Two cacheable types map to the resolver key '{key}'")
            resolvers[key] = factory(cacheable)
        return resolvers

    def query_resolvers(self) -> dict[str, Resolver]:
        """Read resolvers keyed by read key (default "all" + TypeName)."""
        return self._build(self.config.read_key, self._read_resolver)

    def mutation_resolvers(self) -> dict[str, Resolver]:
        """Remove resolvers keyed by remove key (default "remove" + TypeName)."""
        return self._build(self.config.remove_key, self.removal.resolver)

"""
Join accessor - derived sub-lists filtered by a parent's key.

Example: tasks of one project, from the cached allTask list
    tasks_of = create_array_join_connection(registry, "Task", JoinSpec(field="projectId"))
    tasks_of({"id": "p1", "__typename": "Project"}).nodes
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from ..core.defs import ConnectionRecord, JoinSpec
from .registry import ResolverRegistry


def create_array_join_connection(
    registry: ResolverRegistry,
    typename: str,
    join: JoinSpec,
) -> Callable[[Mapping[str, Any]], ConnectionRecord]:
    """
    Build a parent -> sub-list accessor over the cached list of a type.

    Nodes whose join.field equals parent[join.connection_id] are kept. Read
    only; an undeclared type yields an empty record.
    """

    def accessor(parent_value: Optional[Mapping[str, Any]] = None) -> ConnectionRecord:
        parent_value = parent_value or {}
        result = registry.read_nodes_on_type(typename)
        if result is None:
            return registry.connections.empty(typename)

        key = parent_value.get(join.connection_id)
        nodes = [
            node
            for node in result.nodes
            if isinstance(node, Mapping) and node.get(join.field) == key
        ]
        return result.with_nodes(nodes)

    return accessor

"""
Core definitions for cachelink.

These define entity references, connection records, cacheable type
declarations and join descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from graphql import DocumentNode, FragmentDefinitionNode
from pydantic import BaseModel, ConfigDict, Field

from .documents import get_fragment_definition, parse_document
from .errors import CacheConfigError


REF_KEY = "__ref"


@dataclass(frozen=True)
class EntityReference:
    """
    Pointer to a normalized entity record.

    Two references are equal when id and typename match; the cache key is
    derived from them by the store and does not take part in comparison.
    """
    id: Any
    typename: Optional[str]
    cache_key: str = field(compare=False)

    def to_store(self) -> dict[str, Any]:
        """Encode for storage inside a record."""
        return {REF_KEY: self.cache_key, "id": self.id, "typename": self.typename}

    @classmethod
    def from_store(cls, value: dict[str, Any]) -> "EntityReference":
        """Decode a stored reference."""
        return cls(id=value.get("id"), typename=value.get("typename"), cache_key=value[REF_KEY])

    @staticmethod
    def is_stored_reference(value: Any) -> bool:
        return isinstance(value, dict) and REF_KEY in value


class ConnectionRecord(BaseModel):
    """
    Cached "all entities of type T" list.

    Wire form (aliases):
        {"__typename": "AllTaskConnection", "__cacheNodeId": "allTask",
         "totalCount": 2, "nodes": [...]}

    Nodes are EntityReference values when written, and entity data dicts when
    read back through the declared fragment.
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    typename: Optional[str] = Field(default=None, alias="__typename")
    cache_node_id: Optional[str] = Field(default=None, alias="__cacheNodeId")
    total_count: int = Field(default=0, alias="totalCount")
    nodes: list[Any] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        nodes: Iterable[Any] = (),
        typename: Optional[str] = None,
        cache_node_id: Optional[str] = None,
    ) -> "ConnectionRecord":
        nodes = list(nodes)
        return cls(
            typename=typename,
            cache_node_id=cache_node_id,
            total_count=len(nodes),
            nodes=nodes,
        )

    @classmethod
    def from_data(cls, data: Optional[dict[str, Any]]) -> "ConnectionRecord":
        """Build from the wire form returned by a store read."""
        data = data or {}
        return cls(
            typename=data.get("__typename"),
            cache_node_id=data.get("__cacheNodeId"),
            total_count=data.get("totalCount") or 0,
            nodes=list(data.get("nodes") or []),
        )

    def with_nodes(self, nodes: Iterable[Any]) -> "ConnectionRecord":
        """Copy with new nodes; total count follows."""
        nodes = list(nodes)
        return self.model_copy(update={"nodes": nodes, "total_count": len(nodes)})

    def to_data(self) -> dict[str, Any]:
        """Wire form, with references left as EntityReference values."""
        return {
            "__typename": self.typename,
            "__cacheNodeId": self.cache_node_id,
            "totalCount": self.total_count,
            "nodes": list(self.nodes),
        }


@dataclass
class CacheableType:
    """
    Declaration of a list-cacheable entity type.

    The fragment names the fields an entity must have in the store before it
    may be listed.

    Example:
        CacheableType.from_document('''
            fragment TaskFields on Task { id title }
        ''')
    """
    typename: Optional[str]
    fragment_name: Optional[str]
    document: DocumentNode

    @property
    def fragment(self) -> Optional[FragmentDefinitionNode]:
        return get_fragment_definition(self.document, self.fragment_name)

    @classmethod
    def from_document(
        cls,
        source: Union[str, DocumentNode],
        transform: Optional[Callable[[DocumentNode], DocumentNode]] = None,
    ) -> "CacheableType":
        document = parse_document(source)
        if transform is not None:
            document = transform(document)
        fragment = get_fragment_definition(document)
        if fragment is None:
            return cls(typename=None, fragment_name=None, document=document)
        typename = fragment.type_condition.name.value if fragment.type_condition else None
        return cls(typename=typename, fragment_name=fragment.name.value, document=document)

    def is_resolvable(self) -> bool:
        return bool(self.typename and self.fragment_name)


class CacheableTypeMap:
    """
    Cacheable type declarations indexed by type name.

    Declarations without a type name or fragment name are kept out of the
    index. Two declarations for the same type name are a configuration error.
    """

    def __init__(self, declarations: Iterable[CacheableType] = ()):
        self._by_typename: dict[str, CacheableType] = {}
        self.skipped: list[CacheableType] = []
        for declaration in declarations:
            if not declaration.is_resolvable():
                self.skipped.append(declaration)
                continue
            if declaration.typename in self._by_typename:
                raise CacheConfigError(
                    f"Duplicate cacheable type declaration for '{declaration.typename}'"
                )
            self._by_typename[declaration.typename] = declaration

    @classmethod
    def from_documents(
        cls,
        sources: Iterable[Union[str, DocumentNode]],
        transform: Optional[Callable[[DocumentNode], DocumentNode]] = None,
    ) -> "CacheableTypeMap":
        return cls(CacheableType.from_document(source, transform) for source in sources)

    def get(self, typename: Optional[str]) -> Optional[CacheableType]:
        if typename is None:
            return None
        return self._by_typename.get(typename)

    def __contains__(self, typename: object) -> bool:
        return typename in self._by_typename

    def __iter__(self) -> Iterator[CacheableType]:
        return iter(self._by_typename.values())

    def __len__(self) -> int:
        return len(self._by_typename)

    def typenames(self) -> list[str]:
        return list(self._by_typename)


@dataclass
class JoinSpec:
    """
    Join descriptor for derived sub-lists.

    Example: Task.project_id joined to Project.id
        JoinSpec(field="project_id", connection_id="id")
    """
    field: str
    connection_id: str = "id"

"""
Store interfaces.

The reconciliation core talks to the normalized cache only through `Store`.
`RecordBackend` is the key -> record storage a normalized store sits on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator, Mapping, Optional

from graphql import DocumentNode


class RecordBackend(ABC):
    """Key -> JSON-compatible record storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return a copy of the record, or None when absent."""

    @abstractmethod
    def set(self, key: str, record: dict[str, Any]) -> None:
        """Replace the record stored under key."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a record. Returns True if it existed."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over stored record keys."""


class Store(ABC):
    """
    Normalized cache operations used by the walker, synchronizer and resolvers.

    Reads raise ReadMissError when referenced data is absent or incomplete.
    """

    @abstractmethod
    def identify(self, value: Any) -> Optional[str]:
        """Return the cache identity of a result object, or None."""

    @abstractmethod
    def transform_document(self, document: DocumentNode) -> DocumentNode:
        """Normalize a document before its definitions are extracted."""

    @abstractmethod
    def read_query(
        self,
        document: DocumentNode,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Read an operation's selection set from the root record."""

    @abstractmethod
    def read_fragment(
        self,
        identity: str,
        fragment: DocumentNode,
        fragment_name: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """Read a fragment against one entity record; None if the entity is absent."""

    @abstractmethod
    def write_query(
        self,
        document: DocumentNode,
        data: Mapping[str, Any],
        variables: Optional[dict[str, Any]] = None,
    ) -> None:
        """Normalize an operation result into records."""

    @abstractmethod
    def write_data(self, data: Mapping[str, Any]) -> None:
        """Overwrite top-level root fields with the given values."""

    @abstractmethod
    def write_fragment(
        self,
        identity: str,
        fragment: DocumentNode,
        data: Optional[Mapping[str, Any]],
        fragment_name: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
    ) -> None:
        """Write fragment data into one entity record; None data evicts it."""

    @abstractmethod
    def evict(self, identity: str) -> bool:
        """Remove one entity record. Returns True if it existed."""

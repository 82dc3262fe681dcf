"""
Normalized GraphQL cache store.

Results are split into one record per identifiable object:

    {"items": [{"__typename": "Task", "id": "1", "title": "a"}]}
    ->
    ROOT_QUERY: {"items": [{"__ref": "Task:1", "id": "1", "typename": "Task"}]}
    Task:1:     {"__typename": "Task", "id": "1", "title": "a"}

Objects without an identity get a path-derived key ("$ROOT_QUERY.items.0").
Reads follow references and raise ReadMissError on the first missing field.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional

from graphql import DocumentNode, FieldNode, OperationDefinitionNode, OperationType, SelectionSetNode

from ..core.defs import REF_KEY, EntityReference
from ..core.documents import (
    FragmentMap,
    add_typename_to_document,
    create_fragment_map,
    fragment_type_condition,
    get_fragment_definition,
    get_fragment_definitions,
    get_fragment_from_selection,
    get_operation_definition,
    result_key_name,
    should_include,
    storage_key,
)
from ..core.errors import FragmentNotFoundError, ReadMissError
from .backends import MemoryRecordBackend
from .base import RecordBackend, Store

logger = logging.getLogger(__name__)

ROOT_QUERY = "ROOT_QUERY"
ROOT_MUTATION = "ROOT_MUTATION"
ROOT_SUBSCRIPTION = "ROOT_SUBSCRIPTION"

_ROOT_KEYS = {
    OperationType.QUERY: ROOT_QUERY,
    OperationType.MUTATION: ROOT_MUTATION,
    OperationType.SUBSCRIPTION: ROOT_SUBSCRIPTION,
}

DataIdFunction = Callable[[Mapping[str, Any]], Optional[str]]


def default_data_id_from_object(value: Mapping[str, Any]) -> Optional[str]:
    """Task with id "1" -> "Task:1"; anything without both parts has no identity."""
    typename = value.get("__typename")
    entity_id = value.get("id")
    if typename is None or entity_id is None:
        return None
    return f"{typename}:{entity_id}"


def _deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge fragment results so overlapping selections keep all sub-fields."""
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            _deep_merge(existing, value)
        else:
            target[key] = value
    return target


def root_key(operation: OperationDefinitionNode) -> str:
    """Root record an operation reads from and writes to."""
    return _ROOT_KEYS.get(operation.operation, ROOT_QUERY)


def _encode(value: Any) -> Any:
    """Encode a value for write_data: references become stored refs."""
    if isinstance(value, EntityReference):
        return value.to_store()
    if isinstance(value, Mapping):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


class _RecordWriter:
    """Collects record updates for one write and flushes them at the end."""

    def __init__(self, store: "NormalizedStore", fragment_map: FragmentMap, variables: Optional[dict]):
        self.store = store
        self.fragment_map = fragment_map
        self.variables = variables or {}
        self.pending: dict[str, dict[str, Any]] = {}

    def write_selection_set(self, selection_set: SelectionSetNode, result: Mapping[str, Any], data_id: str):
        record = self.pending.setdefault(data_id, {})
        for selection in selection_set.selections:
            if not should_include(selection, self.variables):
                continue
            if isinstance(selection, FieldNode):
                key = result_key_name(selection)
                if key not in result:
                    continue
                record[storage_key(selection, self.variables)] = self.write_value(
                    selection, result[key], f"{data_id}.{key}"
                )
            else:
                fragment = get_fragment_from_selection(selection, self.fragment_map)
                condition = fragment_type_condition(fragment)
                typename = result.get("__typename")
                if condition and typename and condition != typename:
                    continue
                self.write_selection_set(fragment.selection_set, result, data_id)

    def write_value(self, field: FieldNode, value: Any, path: str) -> Any:
        if value is None or field.selection_set is None:
            return value
        if isinstance(value, list):
            return [self.write_value(field, item, f"{path}.{index}") for index, item in enumerate(value)]
        if not isinstance(value, Mapping):
            return value
        data_id = self.store.identify(value) or f"${path}"
        self.write_selection_set(field.selection_set, value, data_id)
        return EntityReference(
            id=value.get("id"),
            typename=value.get("__typename"),
            cache_key=data_id,
        ).to_store()

    def flush(self, backend: RecordBackend, lock: threading.RLock):
        with lock:
            for data_id, fields in self.pending.items():
                record = backend.get(data_id) or {}
                record.update(fields)
                backend.set(data_id, record)


class _RecordReader:
    """Reads a selection set against records, following references."""

    def __init__(self, backend: RecordBackend, fragment_map: FragmentMap, variables: Optional[dict]):
        self.backend = backend
        self.fragment_map = fragment_map
        self.variables = variables or {}

    def read_selection_set(
        self,
        selection_set: SelectionSetNode,
        record: Mapping[str, Any],
        path: str,
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for selection in selection_set.selections:
            if not should_include(selection, self.variables):
                continue
            if isinstance(selection, FieldNode):
                key = storage_key(selection, self.variables)
                if key not in record:
                    raise ReadMissError(f"missing field '{key}'", path)
                value = self.read_value(selection, record[key], f"{path}.{key}")
                result_key = result_key_name(selection)
                if isinstance(result.get(result_key), dict) and isinstance(value, dict):
                    _deep_merge(result[result_key], value)
                else:
                    result[result_key] = value
            else:
                fragment = get_fragment_from_selection(selection, self.fragment_map)
                condition = fragment_type_condition(fragment)
                typename = record.get("__typename")
                if condition and typename and condition != typename:
                    continue
                _deep_merge(result, self.read_selection_set(fragment.selection_set, record, path))
        return result

    def read_value(self, field: FieldNode, value: Any, path: str) -> Any:
        if value is None:
            return None
        if isinstance(value, list):
            return [self.read_value(field, item, f"{path}.{index}") for index, item in enumerate(value)]
        if EntityReference.is_stored_reference(value):
            if field.selection_set is None:
                return EntityReference.from_store(value)
            target_key = value[REF_KEY]
            target = self.backend.get(target_key)
            if target is None:
                raise ReadMissError("dangling reference", target_key)
            return self.read_selection_set(field.selection_set, target, target_key)
        if field.selection_set is not None and isinstance(value, dict):
            return self.read_selection_set(field.selection_set, value, path)
        return value


class NormalizedStore(Store):
    """
    Normalized cache on top of a record backend.

    Usage:
        store = NormalizedStore()                                   # in memory
        store = NormalizedStore(RedisRecordBackend.from_url(url))   # shared

        document = store.transform_document(parse("{ items { id title } }"))
        store.write_query(document, {"items": [...]})
        data = store.read_query(document)
    """

    def __init__(
        self,
        backend: Optional[RecordBackend] = None,
        data_id_from_object: Optional[DataIdFunction] = None,
    ):
        self.backend = backend or MemoryRecordBackend()
        self.data_id_from_object = data_id_from_object or default_data_id_from_object
        # Guards get-update-set of records; every list shares the ROOT_QUERY record.
        self._write_lock = threading.RLock()

    def identify(self, value: Any) -> Optional[str]:
        if not isinstance(value, Mapping):
            return None
        return self.data_id_from_object(value)

    def transform_document(self, document: DocumentNode) -> DocumentNode:
        return add_typename_to_document(document)

    # === Reads ===

    def read_query(self, document: DocumentNode, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        operation = get_operation_definition(document)
        if operation is None:
            raise ValueError("Document has no operation definition")
        root_id = root_key(operation)
        root = self.backend.get(root_id)
        if root is None:
            raise ReadMissError("no root record", root_id)
        reader = _RecordReader(
            self.backend,
            create_fragment_map(get_fragment_definitions(document)),
            variables,
        )
        return reader.read_selection_set(operation.selection_set, root, root_id)

    def read_fragment(
        self,
        identity: str,
        fragment: DocumentNode,
        fragment_name: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        definition = get_fragment_definition(fragment, fragment_name)
        if definition is None:
            raise FragmentNotFoundError(fragment_name or "<first fragment>")
        record = self.backend.get(identity)
        if record is None:
            return None
        reader = _RecordReader(
            self.backend,
            create_fragment_map(get_fragment_definitions(fragment)),
            variables,
        )
        return reader.read_selection_set(definition.selection_set, record, identity)

    # === Writes ===

    def write_query(
        self,
        document: DocumentNode,
        data: Mapping[str, Any],
        variables: Optional[dict[str, Any]] = None,
    ) -> None:
        operation = get_operation_definition(document)
        if operation is None:
            raise ValueError("Document has no operation definition")
        writer = _RecordWriter(
            self,
            create_fragment_map(get_fragment_definitions(document)),
            variables,
        )
        writer.write_selection_set(operation.selection_set, data, root_key(operation))
        writer.flush(self.backend, self._write_lock)

    def write_data(self, data: Mapping[str, Any]) -> None:
        encoded = {key: _encode(value) for key, value in data.items()}
        with self._write_lock:
            root = self.backend.get(ROOT_QUERY) or {}
            root.update(encoded)
            self.backend.set(ROOT_QUERY, root)

    def write_fragment(
        self,
        identity: str,
        fragment: DocumentNode,
        data: Optional[Mapping[str, Any]],
        fragment_name: Optional[str] = None,
        variables: Optional[dict[str, Any]] = None,
    ) -> None:
        if data is None:
            self.evict(identity)
            return
        definition = get_fragment_definition(fragment, fragment_name)
        if definition is None:
            raise FragmentNotFoundError(fragment_name or "<first fragment>")
        writer = _RecordWriter(
            self,
            create_fragment_map(get_fragment_definitions(fragment)),
            variables,
        )
        writer.write_selection_set(definition.selection_set, data, identity)
        writer.flush(self.backend, self._write_lock)

    def evict(self, identity: str) -> bool:
        evicted = self.backend.delete(identity)
        if evicted:
            logger.debug(f"Evicted record {identity}")
        return evicted

from __future__ import annotations

from cachelink.core.config import CacheLinkConfig
from cachelink.core.defs import ConnectionRecord, EntityReference
from cachelink.runtime.collector import EntityCollector
from cachelink.runtime.connections import ConnectionStore
from cachelink.runtime.synchronizer import ConnectionSynchronizer, merge_connection
from cachelink.store.normalized import ROOT_QUERY, NormalizedStore


def _ref(entity_id: str, typename: str = "Task") -> EntityReference:
    return EntityReference(entity_id, typename, f"{typename}:{entity_id}")


def _collector(*ids: str, typename: str = "Task") -> EntityCollector:
    collector = EntityCollector()
    for entity_id in ids:
        collector.add(typename, f"{typename}:{entity_id}", _ref(entity_id, typename))
    return collector


def test_merge_into_nothing() -> None:
    record = merge_connection(None, [_ref("1"), _ref("2")], "AllTaskConnection", "allTask")

    assert record.nodes == [_ref("1"), _ref("2")]
    assert record.total_count == 2
    assert record.typename == "AllTaskConnection"
    assert record.cache_node_id == "allTask"


def test_merge_keeps_previous_order_and_appends_new() -> None:
    previous = ConnectionRecord.build([_ref("1"), _ref("2")], "AllTaskConnection", "allTask")

    record = merge_connection(previous, [_ref("3"), _ref("1"), _ref("3")], "AllTaskConnection", "ignored")

    assert record.nodes == [_ref("1"), _ref("2"), _ref("3")]
    assert record.total_count == 3
    assert record.cache_node_id == "allTask"


def test_merge_is_idempotent() -> None:
    once = merge_connection(None, [_ref("1"), _ref("2")], "AllTaskConnection", "allTask")
    twice = merge_connection(once, [_ref("1"), _ref("2")], "AllTaskConnection", "allTask")

    assert twice == once


def test_synchronize_writes_connection_records(store: NormalizedStore) -> None:
    connections = ConnectionStore(store, CacheLinkConfig())
    synchronizer = ConnectionSynchronizer(connections)

    records = synchronizer.synchronize(_collector("1", "2"))
    synchronizer.synchronize(_collector("3", "1"))

    assert records["Task"].total_count == 2
    stored = store.backend.get(ROOT_QUERY)["allTask"]
    assert stored["__typename"] == "AllTaskConnection"
    assert stored["__cacheNodeId"] == "allTask"
    assert stored["totalCount"] == 3
    assert [node["__ref"] for node in stored["nodes"]] == ["Task:1", "Task:2", "Task:3"]


def test_synchronize_touches_only_collected_types(store: NormalizedStore) -> None:
    connections = ConnectionStore(store, CacheLinkConfig())

    records = ConnectionSynchronizer(connections).synchronize(_collector("p1", typename="Project"))

    assert list(records) == ["Project"]
    assert "allTask" not in store.backend.get(ROOT_QUERY)
    assert connections.read_references("Task") is None
    assert connections.read_references("Project").nodes == [_ref("p1", "Project")]


def test_merge_identity_is_the_cache_key() -> None:
    first = EntityReference(None, "Task", "Task:u1")
    second = EntityReference(None, "Task", "Task:u2")

    record = merge_connection(None, [first, second, first], "AllTaskConnection", "allTask")

    assert [node.cache_key for node in record.nodes] == ["Task:u1", "Task:u2"]
    assert record.total_count == 2

from __future__ import annotations

from typing import Any, Callable

import pytest

from cachelink.core.defs import EntityReference
from cachelink.link.cache_query import CacheQueryLink
from cachelink.runtime.removal import cast_id_set
from tests.support import TASKS_QUERY


@pytest.fixture
def cached_tasks(run_operation: Callable[..., Any], tasks_result: dict[str, Any]) -> None:
    run_operation(TASKS_QUERY, tasks_result)


@pytest.mark.parametrize(
    ("ids", "expected"),
    [
        (None, set()),
        ("1", {"1"}),
        (1, {"1"}),
        (["1", 2, None], {"1", "2"}),
        ({"a", "b"}, {"a", "b"}),
    ],
)
def test_cast_id_set(ids: Any, expected: set[str]) -> None:
    assert cast_id_set(ids) == expected


@pytest.mark.usefixtures("cached_tasks")
def test_remove_one_id(link: CacheQueryLink) -> None:
    assert link.remove("Task", "1") is True

    listed = link.read_nodes_on_type("Task")
    assert listed.total_count == 1
    assert [node["id"] for node in listed.nodes] == ["2"]
    assert link.store.backend.get("Task:1") is None
    assert link.store.backend.get("Task:2") is not None


@pytest.mark.usefixtures("cached_tasks")
def test_remove_accepts_numeric_ids(link: CacheQueryLink) -> None:
    assert link.remove("Task", [1, 2]) is True

    assert link.read_nodes_on_type("Task").total_count == 0


@pytest.mark.usefixtures("cached_tasks")
def test_remove_unlisted_id_keeps_list(link: CacheQueryLink) -> None:
    assert link.remove("Task", ["9"]) is True

    assert link.connections.read_references("Task").nodes == [
        EntityReference("1", "Task", "Task:1"),
        EntityReference("2", "Task", "Task:2"),
    ]


@pytest.mark.usefixtures("cached_tasks")
def test_remove_evicts_unlisted_records_too(link: CacheQueryLink) -> None:
    link.store.backend.set("Task:7", {"__typename": "Task", "id": "7"})

    assert link.remove("Task", ["1", "7"]) is True

    assert link.store.backend.get("Task:7") is None
    assert link.read_nodes_on_type("Task").total_count == 1


@pytest.mark.usefixtures("cached_tasks")
def test_remove_without_ids_is_a_no_op(link: CacheQueryLink) -> None:
    assert link.remove("Task", []) is False
    assert link.remove("Task", None) is False

    assert link.read_nodes_on_type("Task").total_count == 2


def test_remove_without_cached_list(link: CacheQueryLink) -> None:
    link.store.backend.set("Task:1", {"__typename": "Task", "id": "1"})

    assert link.remove("Task", "1") is False
    assert link.store.backend.get("Task:1") is not None


@pytest.mark.usefixtures("cached_tasks")
def test_remove_from_emptied_list(link: CacheQueryLink) -> None:
    link.remove("Task", ["1", "2"])

    assert link.remove("Task", "1") is False


@pytest.mark.usefixtures("cached_tasks")
def test_remove_resolver_reads_id_argument(link: CacheQueryLink) -> None:
    remove_task = link.mutation_resolvers()["removeTask"]

    assert remove_task(None, {"id": ["2"]}) is True
    assert remove_task(None, {}) is False
    assert [node["id"] for node in link.read_nodes_on_type("Task").nodes] == ["1"]

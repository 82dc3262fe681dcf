from __future__ import annotations

from typing import Any

import pytest
from graphql import parse

from cachelink.core.defs import CacheableTypeMap
from cachelink.core.documents import create_fragment_map, get_fragment_definitions, get_operation_definition
from cachelink.core.errors import FragmentNotFoundError
from cachelink.runtime.collector import EntityCollector
from cachelink.runtime.walker import ValueKind, WalkContext, classify_value, lookup_fragment, traverse_selections
from cachelink.store.normalized import NormalizedStore
from tests.support import PROJECT_FRAGMENT, TASK_FRAGMENT, task


def _walk(
    store: NormalizedStore,
    source: str,
    data: dict[str, Any],
    variables: dict[str, Any] | None = None,
    write: bool = True,
) -> EntityCollector:
    document = store.transform_document(parse(source))
    if write:
        store.write_query(document, data, variables)
    context = WalkContext(
        store=store,
        cacheable_types=CacheableTypeMap.from_documents(
            [TASK_FRAGMENT, PROJECT_FRAGMENT], transform=store.transform_document
        ),
        fragment_map=create_fragment_map(get_fragment_definitions(document)),
        variables=variables or {},
    )
    traverse_selections(get_operation_definition(document).selection_set, data, context)
    return context.collector


def test_collects_cache_complete_entities_in_order(store: NormalizedStore) -> None:
    collector = _walk(store, "{ items { id title } }", {"items": [task("2", "b"), task("1", "a")]})

    assert collector.typenames() == ["Task"]
    assert collector.cache_keys("Task") == ["Task:2", "Task:1"]


def test_nested_entities_are_collected(store: NormalizedStore) -> None:
    data = {
        "projects": [
            {"__typename": "Project", "id": "p1", "name": "home", "tasks": [task("1", "a")]},
        ]
    }

    collector = _walk(store, "{ projects { id name tasks { id title } } }", data)

    assert collector.cache_keys("Project") == ["Project:p1"]
    assert collector.cache_keys("Task") == ["Task:1"]


def test_incomplete_entities_are_skipped(store: NormalizedStore) -> None:
    collector = _walk(store, "{ items { id } }", {"items": [task("1", "a")]})

    assert not collector
    assert len(collector) == 0


def test_entities_missing_from_store_are_skipped(store: NormalizedStore) -> None:
    collector = _walk(store, "{ items { id title } }", {"items": [task("1", "a")]}, write=False)

    assert "Task" not in collector


def test_undeclared_types_are_ignored(store: NormalizedStore) -> None:
    data = {"items": [{"__typename": "Comment", "id": "c1", "title": "x"}]}

    assert not _walk(store, "{ items { id title } }", data)


def test_objects_without_identity_are_descended_not_collected(store: NormalizedStore) -> None:
    data = {"viewer": {"__typename": "Viewer", "tasks": [task("1", "a")]}}

    collector = _walk(store, "{ viewer { tasks { id title } } }", data)

    assert collector.typenames() == ["Task"]


def test_duplicate_identities_are_collected_once(store: NormalizedStore) -> None:
    data = {"items": [task("1", "a")], "again": [task("1", "a")]}

    collector = _walk(store, "{ items { id title } again: items { id title } }", data)

    assert len(collector) == 1


def test_skip_and_include_directives(store: NormalizedStore) -> None:
    source = "query Q($skip: Boolean!) { items @skip(if: $skip) { id title } }"
    data = {"items": [task("1", "a")]}

    assert not _walk(store, source, data, {"skip": True})
    assert _walk(store, source, data, {"skip": False}).cache_keys("Task") == ["Task:1"]


def test_include_with_missing_variable_excludes(store: NormalizedStore) -> None:
    source = "query Q($on: Boolean) { items @include(if: $on) { id title } }"

    assert not _walk(store, source, {"items": [task("1", "a")]})


def test_inline_and_named_fragments(store: NormalizedStore) -> None:
    source = """
        query Q {
            node { ... on Task { id title } }
            items { ...TaskFields }
        }
        fragment TaskFields on Task { id title }
    """
    data = {"node": task("1", "a"), "items": [task("2", "b")]}

    collector = _walk(store, source, data)

    assert collector.cache_keys("Task") == ["Task:1", "Task:2"]


def test_unknown_fragment_raises(store: NormalizedStore) -> None:
    with pytest.raises(FragmentNotFoundError):
        _walk(store, "{ items { ...Missing } }", {"items": [task("1", "a")]}, write=False)


def test_shape_mismatch_is_treated_as_leaf(store: NormalizedStore) -> None:
    collector = _walk(store, "{ items { id title } }", {"items": "not a list"})

    assert not collector


def test_null_and_missing_values(store: NormalizedStore) -> None:
    data = {"items": [None, task("1", "a")], "node": None}

    collector = _walk(store, "{ items { id title } node { id } }", data)

    assert collector.cache_keys("Task") == ["Task:1"]


def test_classify_value() -> None:
    operation = get_operation_definition(parse("{ items { id } name }"))
    items, name = operation.selection_set.selections

    assert classify_value(items, [1]) is ValueKind.LIST
    assert classify_value(items, {"id": "1"}) is ValueKind.OBJECT
    assert classify_value(items, None) is ValueKind.SCALAR
    assert classify_value(items, 5) is ValueKind.SCALAR
    assert classify_value(name, {"id": "1"}) is ValueKind.SCALAR


def test_lookup_fragment_logs_unexpected_errors(caplog: pytest.LogCaptureFixture) -> None:
    class BrokenStore(NormalizedStore):
        def read_fragment(self, *args: Any, **kwargs: Any) -> Any:
            raise RuntimeError("backend down")

    cacheable = CacheableTypeMap.from_documents([TASK_FRAGMENT]).get("Task")

    with caplog.at_level("WARNING"):
        assert lookup_fragment(BrokenStore(), "Task:1", cacheable) is None

    assert "backend down" in caplog.text

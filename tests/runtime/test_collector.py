from __future__ import annotations

from cachelink.core.defs import EntityReference
from cachelink.runtime.collector import EntityCollector


def _ref(entity_id: str, typename: str = "Task") -> EntityReference:
    return EntityReference(entity_id, typename, f"{typename}:{entity_id}")


def test_first_sighting_fixes_position() -> None:
    collector = EntityCollector()

    assert collector.add("Task", "Task:2", _ref("2")) is True
    assert collector.add("Task", "Task:1", _ref("1")) is True
    assert collector.add("Task", "Task:2", _ref("2")) is False

    assert collector.references("Task") == [_ref("2"), _ref("1")]
    assert collector.references("Project") == []
    assert len(collector) == 2


def test_merge_keeps_existing_entries_first() -> None:
    first = EntityCollector()
    first.add("Task", "Task:1", _ref("1"))
    second = EntityCollector()
    second.add("Task", "Task:2", _ref("2"))
    second.add("Task", "Task:1", _ref("1"))
    second.add("Project", "Project:p1", _ref("p1", "Project"))

    first.merge(second)

    assert first.cache_keys("Task") == ["Task:1", "Task:2"]
    assert list(first) == ["Task", "Project"]
    assert "Project" in first

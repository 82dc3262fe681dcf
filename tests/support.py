from __future__ import annotations

from typing import TYPE_CHECKING, Any

from graphql import FieldNode, InlineFragmentNode, SelectionSetNode, parse

from cachelink.core.documents import get_operation_definition
from cachelink.core.query_types import GraphQLResponse, Operation
from cachelink.link.base import Link

if TYPE_CHECKING:
    from collections.abc import Iterator


TASK_FRAGMENT = "fragment TaskFields on Task { id title }"
PROJECT_FRAGMENT = "fragment ProjectFields on Project { id name }"

TASKS_QUERY = "query Tasks { items { id title } }"


def task(task_id: str, title: str, **extra: Any) -> dict[str, Any]:
    return {"id": task_id, "__typename": "Task", "title": title, **extra}


class StaticLink(Link):
    """Terminal link answering every operation with preset responses."""

    def __init__(self, *responses: GraphQLResponse | Exception):
        self.responses = responses
        self.operations: list[Operation] = []

    def request(self, operation, forward=None) -> Iterator[GraphQLResponse]:
        self.operations.append(operation)
        for response in self.responses:
            if isinstance(response, Exception):
                raise response
            yield response


class FakeRedis:
    """Dict-backed stand-in for the handful of redis.Redis calls the backend makes."""

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def scan_iter(self, match: str = "*") -> list[str]:
        prefix = match.rstrip("*")
        return [key for key in list(self.data) if key.startswith(prefix)]


def answer_selection(query: str, source: dict[str, Any]) -> dict[str, Any]:
    """Resolve a query against source data, returning only the selected fields."""
    operation = get_operation_definition(parse(query))
    return _select(operation.selection_set, source)


def _select(selection_set: SelectionSetNode, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [_select(selection_set, item) for item in value]
    result: dict[str, Any] = {}
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            key = selection.alias.value if selection.alias else selection.name.value
            field_value = value.get(selection.name.value)
            if selection.selection_set is not None:
                field_value = _select(selection.selection_set, field_value)
            result[key] = field_value
        elif isinstance(selection, InlineFragmentNode):
            result.update(_select(selection.selection_set, value))
    return result

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from cachelink.core.query_types import GraphQLResponse, Operation
from cachelink.link.base import execute
from cachelink.link.cache_query import CacheQueryLink
from cachelink.store.normalized import NormalizedStore
from tests.support import PROJECT_FRAGMENT, TASK_FRAGMENT, StaticLink, task

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def store() -> NormalizedStore:
    return NormalizedStore()


@pytest.fixture
def link(store: NormalizedStore) -> CacheQueryLink:
    return CacheQueryLink(store, [TASK_FRAGMENT, PROJECT_FRAGMENT])


@pytest.fixture
def run_operation(link: CacheQueryLink) -> Callable[..., list[GraphQLResponse]]:
    """Send one operation through [link, StaticLink(data)] and drain the responses."""

    def run(query: str, data: dict[str, Any], variables: dict[str, Any] | None = None) -> list[GraphQLResponse]:
        terminal = StaticLink(GraphQLResponse(data=data))
        return list(execute([link, terminal], Operation.create(query, variables)))

    return run


@pytest.fixture
def tasks_result() -> dict[str, Any]:
    return {"items": [task("1", "a"), task("2", "b")]}

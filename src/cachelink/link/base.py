"""
Link chain - composable stages an operation passes through.

Each link receives the operation and a `forward` callable for the rest of
the chain, and yields responses. Responses are produced lazily: a caller that
stops iterating stops every stage behind it.

Usage:
    links = [CacheQueryLink(store, fragments), HttpLink("https://api/graphql")]
    for response in execute(links, Operation.create("{ items { id } }")):
        print(response.data)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, Optional, Sequence

from ..core.errors import LinkError
from ..core.query_types import GraphQLResponse, Operation

Forward = Callable[[Operation], Iterable[GraphQLResponse]]


class Link(ABC):
    """One stage of the transport chain."""

    @abstractmethod
    def request(self, operation: Operation, forward: Optional[Forward] = None) -> Iterator[GraphQLResponse]:
        """Handle an operation, usually by forwarding it and relaying responses."""


def _forward_from(links: Sequence[Link], index: int) -> Forward:
    def forward(operation: Operation) -> Iterator[GraphQLResponse]:
        if index >= len(links):
            raise LinkError("Link chain has no terminating link")
        next_forward = _forward_from(links, index + 1) if index + 1 < len(links) else None
        return iter(links[index].request(operation, next_forward))

    return forward


def execute(links: Sequence[Link], operation: Operation) -> Iterator[GraphQLResponse]:
    """Run an operation through a chain of links."""
    return _forward_from(list(links), 0)(operation)

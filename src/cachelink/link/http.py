"""
HTTP link - terminal link posting operations to a GraphQL endpoint.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

import httpx
from pydantic import ValidationError

from ..core.errors import TransportError
from ..core.query_types import GraphQLResponse, Operation
from .base import Forward, Link

logger = logging.getLogger(__name__)


class HttpLink(Link):
    """
    Posts {"query", "variables", "operationName"} and yields one response.

    Usage:
        link = HttpLink("http://api:8000/graphql", headers={"Authorization": "..."})
        response = next(link.request(Operation.create("{ items { id } }")))
    """

    def __init__(
        self,
        uri: str,
        timeout: float = 30.0,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize HTTP link.

        Args:
            uri: GraphQL endpoint URL
            timeout: HTTP request timeout in seconds
            headers: Extra headers sent with every request
            client: Preconfigured httpx client (created lazily otherwise)
        """
        self.uri = uri
        self.timeout = timeout
        self.headers = headers or {}
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self):
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def fetch(self, operation: Operation) -> GraphQLResponse:
        """
        Post one operation.

        Raises:
            TransportError: On a non-200 status, a network failure or a body
                that is not a GraphQL response
        """
        client = self._get_client()
        request = operation.to_request()

        try:
            response = client.post(
                self.uri,
                json=request.model_dump(by_alias=True, exclude_none=True),
                headers=self.headers,
            )
        except httpx.RequestError as e:
            raise TransportError(endpoint=self.uri, status_code=0, message=str(e))

        if response.status_code != 200:
            raise TransportError(
                endpoint=self.uri,
                status_code=response.status_code,
                message=response.text,
            )

        try:
            result = GraphQLResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(
                endpoint=self.uri,
                status_code=response.status_code,
                message=f"Invalid GraphQL response body: {e}",
            )

        logger.debug(f"{operation.operation_name or 'anonymous'} operation answered by {self.uri}")
        return result

    def request(self, operation: Operation, forward: Optional[Forward] = None) -> Iterator[GraphQLResponse]:
        yield self.fetch(operation)

"""
Operation and wire types for the transport chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from graphql import DocumentNode, print_ast
from pydantic import BaseModel, ConfigDict, Field

from .documents import get_operation_definition, parse_document


@dataclass
class Operation:
    """
    A GraphQL operation travelling through the link chain.

    Usage:
        operation = Operation.create("query { items { id title } }")
        operation = Operation.create(document, variables={"first": 10})
    """
    query: DocumentNode
    variables: dict[str, Any] = field(default_factory=dict)
    operation_name: Optional[str] = None
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        query: Union[str, DocumentNode],
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> "Operation":
        document = parse_document(query)
        if operation_name is None:
            definition = get_operation_definition(document)
            if definition is not None and definition.name is not None:
                operation_name = definition.name.value
        return cls(
            query=document,
            variables=dict(variables or {}),
            operation_name=operation_name,
            context=dict(context or {}),
        )

    def to_request(self) -> "GraphQLRequest":
        return GraphQLRequest(
            query=print_ast(self.query),
            variables=self.variables,
            operation_name=self.operation_name,
        )


class GraphQLRequest(BaseModel):
    """
    Request body posted to a GraphQL endpoint.

    POST /graphql
    """
    model_config = ConfigDict(populate_by_name=True)

    query: str
    variables: dict[str, Any] = Field(default_factory=dict)
    operation_name: Optional[str] = Field(default=None, alias="operationName")


class GraphQLResponse(BaseModel):
    """
    Response from a GraphQL endpoint.

    A response with errors may still carry partial data.
    """
    data: Optional[dict[str, Any]] = None
    errors: Optional[list[dict[str, Any]]] = None
    extensions: Optional[dict[str, Any]] = None

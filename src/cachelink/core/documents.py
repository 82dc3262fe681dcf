"""
GraphQL document helpers built on graphql-core.

Covers what the walker and the store need from a parsed document:
- Operation and fragment extraction
- Directive evaluation (@skip / @include)
- Result keys and storage keys for fields
- Adding __typename to selection sets
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    NameNode,
    OperationDefinitionNode,
    SelectionNode,
    SelectionSetNode,
    Visitor,
    parse,
    visit,
)
from graphql.pyutils import Undefined
from graphql.utilities import value_from_ast_untyped

from .errors import FragmentNotFoundError


TYPENAME_FIELD = FieldNode(name=NameNode(value="__typename"))

FragmentMap = dict[str, FragmentDefinitionNode]


def parse_document(source: Union[str, DocumentNode]) -> DocumentNode:
    """Parse a GraphQL source string; documents pass through unchanged."""
    if isinstance(source, DocumentNode):
        return source
    return parse(source)


def get_operation_definition(document: DocumentNode) -> Optional[OperationDefinitionNode]:
    """Return the first operation definition of a document, if any."""
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            return definition
    return None


def get_fragment_definitions(document: DocumentNode) -> list[FragmentDefinitionNode]:
    """Return all fragment definitions of a document, in document order."""
    return [
        definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    ]


def get_fragment_definition(
    document: DocumentNode,
    fragment_name: Optional[str] = None,
) -> Optional[FragmentDefinitionNode]:
    """
    Return a fragment definition from a document.

    Without a name the first fragment is returned, which is how single-fragment
    type declarations are written.
    """
    for fragment in get_fragment_definitions(document):
        if fragment_name is None or fragment.name.value == fragment_name:
            return fragment
    return None


def create_fragment_map(fragments: list[FragmentDefinitionNode]) -> FragmentMap:
    """Index fragment definitions by name."""
    return {fragment.name.value: fragment for fragment in fragments}


def is_field(selection: SelectionNode) -> bool:
    return isinstance(selection, FieldNode)


def is_inline_fragment(selection: SelectionNode) -> bool:
    return isinstance(selection, InlineFragmentNode)


def get_fragment_from_selection(
    selection: SelectionNode,
    fragment_map: FragmentMap,
) -> Union[InlineFragmentNode, FragmentDefinitionNode]:
    """
    Resolve a fragment selection to the node holding its selection set.

    Raises:
        FragmentNotFoundError: If a named spread has no definition
    """
    if isinstance(selection, InlineFragmentNode):
        return selection
    if isinstance(selection, FragmentSpreadNode):
        name = selection.name.value
        fragment = fragment_map.get(name)
        if fragment is None:
            raise FragmentNotFoundError(name)
        return fragment
    raise TypeError(f"Not a fragment selection: {selection.kind}")


def fragment_type_condition(
    fragment: Union[InlineFragmentNode, FragmentDefinitionNode],
) -> Optional[str]:
    """Return the type name a fragment is conditioned on, if any."""
    type_condition = fragment.type_condition
    if type_condition is None:
        return None
    return type_condition.name.value


def should_include(selection: SelectionNode, variables: Optional[dict[str, Any]] = None) -> bool:
    """
    Evaluate @skip and @include directives on a selection.

    A missing variable counts as false.
    """
    for directive in selection.directives or ():
        name = directive.name.value
        if name not in ("skip", "include"):
            continue
        condition = False
        for argument in directive.arguments or ():
            if argument.name.value == "if":
                value = value_from_ast_untyped(argument.value, variables)
                condition = bool(value) if value is not Undefined else False
        if name == "skip" and condition:
            return False
        if name == "include" and not condition:
            return False
    return True


def result_key_name(field: FieldNode) -> str:
    """Return the key a field's value has in a result (alias or name)."""
    return field.alias.value if field.alias else field.name.value


def field_arguments(field: FieldNode, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Resolve a field's arguments against operation variables."""
    arguments: dict[str, Any] = {}
    for argument in field.arguments or ():
        value = value_from_ast_untyped(argument.value, variables)
        arguments[argument.name.value] = None if value is Undefined else value
    return arguments


def storage_key(field: FieldNode, variables: Optional[dict[str, Any]] = None) -> str:
    """
    Return the key a field is stored under in a normalized record.

    Fields with arguments are stored per argument set:
        items(first: 10) -> items({"first": 10})
    """
    name = field.name.value
    arguments = field_arguments(field, variables)
    if not arguments:
        return name
    return f"{name}({json.dumps(arguments, sort_keys=True, default=str)})"


class _AddTypenameVisitor(Visitor):
    """Appends __typename to every selection set below the operation root."""

    def leave_selection_set(self, node: SelectionSetNode, _key, parent, *_args):
        if isinstance(parent, OperationDefinitionNode):
            return None
        for selection in node.selections:
            if isinstance(selection, FieldNode) and selection.name.value == "__typename":
                return None
        return SelectionSetNode(selections=(*node.selections, TYPENAME_FIELD))


def add_typename_to_document(document: DocumentNode) -> DocumentNode:
    """Return a copy of the document with __typename selected on every object."""
    return visit(document, _AddTypenameVisitor())

"""
Selection tree walker - finds list-eligible entities in an operation result.

Walks the operation's selection set and the result side by side:
- Fields descend into their value (per element for lists)
- Fragments re-walk the same result with the fragment's selections
- @skip / @include are evaluated against the operation variables

Every object with a cache identity whose type is declared cacheable is
checked against the store: only entities whose declared fragment can be
read back in full are collected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from graphql import FieldNode, SelectionSetNode

from ..core.defs import CacheableType, CacheableTypeMap, EntityReference
from ..core.documents import (
    FragmentMap,
    get_fragment_from_selection,
    is_field,
    result_key_name,
    should_include,
)
from ..core.errors import ReadMissError
from ..store.base import Store
from .collector import EntityCollector

logger = logging.getLogger(__name__)


class ValueKind(Enum):
    """Shape of a field value, decided once per value."""
    SCALAR = "scalar"
    LIST = "list"
    OBJECT = "object"


def classify_value(field: FieldNode, value: Any) -> ValueKind:
    """
    Classify a field value.

    Leaf fields, nulls, and anything that is neither a list nor a mapping are
    scalars. A non-container under a field with a selection set does not match
    the query shape; it is treated as a leaf and never descended into.
    """
    if field.selection_set is None or value is None:
        return ValueKind.SCALAR
    if isinstance(value, list):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    logger.debug(
        f"Field '{result_key_name(field)}' has a selection set but a "
        f"{type(value).__name__} value; treating it as a leaf"
    )
    return ValueKind.SCALAR


@dataclass
class WalkContext:
    """
    Everything a walk needs besides the selection set and the result.

    The collector is the only thing a walk mutates.
    """
    store: Store
    cacheable_types: CacheableTypeMap
    fragment_map: FragmentMap = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    collector: EntityCollector = field(default_factory=EntityCollector)


def traverse_selections(
    selection_set: Optional[SelectionSetNode],
    result: Any,
    context: WalkContext,
) -> None:
    """
    Walk a selection set against a result value, collecting entities.

    Raises:
        FragmentNotFoundError: If a fragment spread names an undefined fragment
    """
    if selection_set is None:
        return

    for selection in selection_set.selections:
        if result is None or not should_include(selection, context.variables):
            continue

        if is_field(selection):
            if not isinstance(result, Mapping):
                continue
            value = result.get(result_key_name(selection))
            _visit_value(selection, value, context)
        else:
            fragment = get_fragment_from_selection(selection, context.fragment_map)
            traverse_selections(fragment.selection_set, result, context)


def _visit_value(field: FieldNode, value: Any, context: WalkContext) -> None:
    """Descend into one field value, then collect it if it is an entity."""
    kind = classify_value(field, value)

    if kind is ValueKind.LIST:
        for item in value:
            _visit_value(field, item, context)
    elif kind is ValueKind.OBJECT:
        traverse_selections(field.selection_set, value, context)
        _collect_entity(value, context)


def _collect_entity(value: Mapping[str, Any], context: WalkContext) -> None:
    cache_key = context.store.identify(value)
    if not cache_key:
        return

    typename = value.get("__typename")
    cacheable = context.cacheable_types.get(typename)
    if cacheable is None:
        return

    if lookup_fragment(context.store, cache_key, cacheable, context.variables) is None:
        logger.debug(f"Skipping {cache_key}: fragment {cacheable.fragment_name} not satisfiable yet")
        return

    reference = EntityReference(id=value.get("id"), typename=typename, cache_key=cache_key)
    context.collector.add(typename, cache_key, reference)


def lookup_fragment(
    store: Store,
    cache_key: str,
    cacheable: CacheableType,
    variables: Optional[dict[str, Any]] = None,
) -> Optional[dict[str, Any]]:
    """
    Read a declared fragment for one entity; None means "not cache-complete".

    A read miss is the expected outcome for entities the store does not hold
    in full yet. Any other failure is logged and treated the same way.
    """
    try:
        return store.read_fragment(
            cache_key,
            cacheable.document,
            cacheable.fragment_name,
            variables,
        )
    except ReadMissError:
        return None
    except Exception as e:
        logger.warning(f"Fragment read failed for {cache_key}: {e}", exc_info=True)
        return None

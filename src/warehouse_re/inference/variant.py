"""Subtype resolution for variant (tagged union) columns."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from warehouse_re.inference.classifier import classify_value
from warehouse_re.models import ArrayNode, ObjectNode, ValueKind, VariantNode

logger = logging.getLogger(__name__)


def observed_kinds(rows: Sequence[Mapping[str, Any]], name: str) -> List[ValueKind]:
    """
    Collect the distinct kinds seen for a column, in first-seen order.

    Rows without the column are skipped. Scanning stops as soon as an
    object is seen since nothing can outrank it.
    """
    kinds: List[ValueKind] = []
    for row in rows:
        if ValueKind.OBJECT in kinds:
            break
        if not isinstance(row, Mapping) or name not in row:
            continue
        kind = classify_value(row[name])
        if kind not in kinds:
            kinds.append(kind)
    return kinds


def resolve_subtype(kinds: Sequence[ValueKind]) -> Optional[ValueKind]:
    """Pick the winning subtype: object > array > first seen (null deferred)."""
    if not kinds:
        return None
    if ValueKind.OBJECT in kinds:
        return ValueKind.OBJECT
    if ValueKind.ARRAY in kinds:
        return ValueKind.ARRAY
    first = kinds[0]
    if first == ValueKind.NULL:
        return kinds[1] if len(kinds) > 1 else None
    return first


def placeholder(kind: Optional[ValueKind]) -> VariantNode:
    """Minimal variant node for a kind, with an empty child for containers."""
    if kind == ValueKind.OBJECT:
        return VariantNode(subtype=kind, child=ObjectNode())
    if kind == ValueKind.ARRAY:
        return VariantNode(subtype=kind, child=ArrayNode())
    return VariantNode(subtype=kind)


def resolve_variant(rows: Sequence[Mapping[str, Any]], name: str) -> VariantNode:
    """Resolve the VariantNode for a variant column from sample rows."""
    kinds = observed_kinds(rows, name)
    subtype = resolve_subtype(kinds)
    logger.debug(f"Variant column {name}: observed {[k.value for k in kinds]} -> {subtype}")
    return placeholder(subtype)

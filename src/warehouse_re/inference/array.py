"""Element-shape inference for array columns."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from warehouse_re.inference.classifier import classify_value, is_array
from warehouse_re.inference.variant import placeholder
from warehouse_re.models import ArrayNode, ValueKind


def element_kinds(rows: Sequence[Mapping[str, Any]], name: str) -> List[ValueKind]:
    """Distinct kinds of all array elements of a column, in first-seen order."""
    kinds: List[ValueKind] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        value = row.get(name)
        # Non-array placeholders (e.g. null) contribute nothing
        if not is_array(value):
            continue
        for element in value:
            kind = classify_value(element)
            if kind not in kinds:
                kinds.append(kind)
    return kinds


def infer_array(rows: Sequence[Mapping[str, Any]], name: str) -> ArrayNode:
    """
    Infer the ArrayNode for an array column.

    Only the outermost element kind is reported; nested arrays and objects
    become empty placeholders.
    """
    return ArrayNode(items=tuple(placeholder(kind) for kind in element_kinds(rows, name)))

"""Key-shape inference for object (map) columns."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Sequence

from warehouse_re.inference.classifier import is_mapping
from warehouse_re.models import ColumnEntry, DeclaredType, ObjectNode, SchemaNode

# (columns, rows, depth) -> schema; supplied by the SchemaBuilder
Dispatch = Callable[[Sequence[ColumnEntry], Sequence[Mapping[str, Any]], int], Dict[str, SchemaNode]]


def sub_documents(rows: Sequence[Mapping[str, Any]], name: str) -> List[Mapping[str, Any]]:
    """Values of a column that are plain mappings; anything else is discarded."""
    return [
        row[name] for row in rows
        if isinstance(row, Mapping) and is_mapping(row.get(name))
    ]


def union_keys(documents: Sequence[Mapping[str, Any]]) -> List[str]:
    """Union of keys across documents, in first-seen order."""
    keys: Dict[str, None] = {}
    for document in documents:
        for key in document:
            keys.setdefault(key, None)
    return list(keys)


def infer_object(
    rows: Sequence[Mapping[str, Any]],
    name: str,
    dispatch: Dispatch,
    depth: int = 0,
) -> ObjectNode:
    """
    Infer the ObjectNode for an object column.

    Each key found in the sub-documents becomes a pseudo column of declared
    type variant, and the sub-documents are fed back through ``dispatch``
    as if they were rows of their own table.
    """
    documents = sub_documents(rows, name)
    columns = [ColumnEntry(name=key, declared_type=DeclaredType.VARIANT) for key in union_keys(documents)]
    if not columns:
        return ObjectNode()
    return ObjectNode(properties=dispatch(columns, documents, depth + 1))

"""Preparation of sampled rows before they are handed to the modeling tool."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

from warehouse_re.inference.classifier import is_array, is_mapping, is_null
from warehouse_re.models import ArrayNode, SchemaNode

logger = logging.getLogger(__name__)


def filter_null(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop null-valued keys from a sampled row."""
    return {key: value for key, value in row.items() if not _is_null_scalar(value)}


def _is_null_scalar(value: Any) -> bool:
    return not is_array(value) and not is_mapping(value) and is_null(value)


def prepare_documents(
    schema: Mapping[str, SchemaNode],
    rows: Sequence[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Rewrite array-column values into lists of JSON-serialised objects.

    Scalar array elements are dropped and non-array values are left
    as they are. Rows are returned unchanged (as copies) if anything goes
    wrong.
    """
    try:
        return [_prepare_row(schema, row) for row in rows]
    except Exception as e:
        logger.warning(f"Could not prepare sample documents: {e}")
        return [dict(row) for row in rows]


def _prepare_row(schema: Mapping[str, SchemaNode], row: Mapping[str, Any]) -> Dict[str, Any]:
    prepared: Dict[str, Any] = {}
    for key, value in row.items():
        if isinstance(schema.get(key), ArrayNode) and is_array(value):
            prepared[key] = [
                json.dumps(item, default=_json_default)
                for item in value if is_mapping(item) or is_array(item)
            ]
        else:
            prepared[key] = value
    return prepared


def _json_default(value: Any) -> Any:
    if hasattr(value, "tolist"):
        return value.tolist()
    if is_mapping(value):
        return dict(value)
    return str(value)

"""
Schema builder: the single entry point of the inference engine.

Dispatches each column of a table's catalog to the resolver matching its
declared type. Columns with a scalar declared type pass through untouched;
a column whose inference fails degrades to an empty node of its kind
without affecting the rest of the table.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from warehouse_re.inference.array import infer_array
from warehouse_re.inference.objects import infer_object
from warehouse_re.inference.variant import resolve_variant
from warehouse_re.models import (
    ArrayNode,
    ColumnEntry,
    DeclaredType,
    InferenceConfig,
    ObjectNode,
    ScalarNode,
    SchemaNode,
    VariantNode,
)

logger = logging.getLogger(__name__)


def empty_node(column: ColumnEntry) -> SchemaNode:
    """Minimal well-typed node for a column's declared type."""
    if column.declared_type == DeclaredType.VARIANT:
        return VariantNode()
    if column.declared_type == DeclaredType.ARRAY:
        return ArrayNode()
    if column.declared_type == DeclaredType.OBJECT:
        return ObjectNode()
    return ScalarNode(raw_type=column.raw_type)


class SchemaBuilder:
    """
    Builds a column name -> SchemaNode mapping from a column catalog and
    sample rows.

    Holds no state besides its configuration, so one builder may be shared
    across tables and threads.
    """

    def __init__(self, config: Optional[InferenceConfig] = None):
        self.config = config or InferenceConfig()

    def build(
        self,
        columns: Sequence[ColumnEntry],
        rows: Sequence[Mapping[str, Any]],
    ) -> Dict[str, SchemaNode]:
        """
        Infer the schema of every column.

        Args:
            columns: Column catalog in table order
            rows: Sampled rows; never modified

        Returns:
            Dict of column name to SchemaNode, in catalog order
        """
        return self._build(columns, rows, 0)

    def _build(
        self,
        columns: Sequence[ColumnEntry],
        rows: Sequence[Mapping[str, Any]],
        depth: int,
    ) -> Dict[str, SchemaNode]:
        return {column.name: self._infer_column(column, rows, depth) for column in columns}

    def _infer_column(
        self,
        column: ColumnEntry,
        rows: Sequence[Mapping[str, Any]],
        depth: int,
    ) -> SchemaNode:
        try:
            if column.declared_type == DeclaredType.VARIANT:
                return resolve_variant(rows, column.name)
            if column.declared_type == DeclaredType.ARRAY:
                return infer_array(rows, column.name)
            if column.declared_type == DeclaredType.OBJECT:
                if depth >= self.config.max_depth:
                    logger.debug(f"Max depth {self.config.max_depth} reached at column {column.name}")
                    return ObjectNode()
                return infer_object(rows, column.name, self._build, depth)
            return ScalarNode(raw_type=column.raw_type)
        except Exception as e:
            logger.warning(f"Schema inference failed for column {column.name}: {e}")
            return empty_node(column)


def infer_schema(
    columns: Sequence[ColumnEntry],
    rows: Sequence[Mapping[str, Any]],
    config: Optional[InferenceConfig] = None,
) -> Dict[str, SchemaNode]:
    """Convenience function wrapping SchemaBuilder.build."""
    return SchemaBuilder(config).build(columns, rows)

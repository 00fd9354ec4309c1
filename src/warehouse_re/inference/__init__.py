"""
Structural type inference for semi-structured warehouse columns.

Derives a stable schema for variant, array and object columns from a
bounded sample of rows:

    from warehouse_re.inference import infer_schema

    schema = infer_schema(columns, rows)
"""

from warehouse_re.inference.array import infer_array
from warehouse_re.inference.builder import SchemaBuilder, infer_schema
from warehouse_re.inference.classifier import classify_value
from warehouse_re.inference.objects import infer_object
from warehouse_re.inference.variant import resolve_variant

__all__ = [
    "SchemaBuilder",
    "infer_schema",
    "classify_value",
    "resolve_variant",
    "infer_array",
    "infer_object",
]

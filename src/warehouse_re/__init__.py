"""
Warehouse RE - Schema reverse-engineering for semi-structured warehouse tables

Derives a structural schema for a modeling tool from a table's column
catalog and a bounded sample of its rows.

Features:
- Sample-driven shape inference for VARIANT, ARRAY and OBJECT columns
- Recursive key discovery for object columns
- Clustering key expression parsing
- Container, entity and file format metadata reshaping
"""

__version__ = "0.1.0"

from warehouse_re.models import (
    ArrayNode,
    ClusteringKeySegment,
    ColumnEntry,
    DeclaredType,
    EntityPackage,
    InferenceConfig,
    ObjectNode,
    ScalarNode,
    ValueKind,
    VariantNode,
    schema_to_dict,
)

from warehouse_re.inference import SchemaBuilder, classify_value, infer_schema

from warehouse_re.discovery import ClusteringKeyParser, parse_clustering_key

from warehouse_re.reverse import ReverseEngineer

__all__ = [
    # Core models
    "ArrayNode",
    "ClusteringKeySegment",
    "ColumnEntry",
    "DeclaredType",
    "EntityPackage",
    "InferenceConfig",
    "ObjectNode",
    "ScalarNode",
    "ValueKind",
    "VariantNode",
    "schema_to_dict",
    # Inference
    "SchemaBuilder",
    "classify_value",
    "infer_schema",
    # Clustering keys
    "ClusteringKeyParser",
    "parse_clustering_key",
    # Pipeline
    "ReverseEngineer",
]

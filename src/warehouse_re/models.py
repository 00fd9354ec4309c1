"""
Core data models for the warehouse_re package.

Defines the column catalog, the inferred schema node types, clustering key
segments and the configuration/result objects shared by the inference
engine, the metadata helpers and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml


class DeclaredType(str, Enum):
    """Coarse column types reported by the warehouse catalog."""
    VARIANT = "variant"
    ARRAY = "array"
    OBJECT = "object"
    OTHER = "other"


class ValueKind(str, Enum):
    """Shape tag of a single sampled value."""
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    BINARY = "binary"
    TIMESTAMP = "timestamp"
    UNKNOWN = "unknown"


@dataclass
class ColumnEntry:
    """One column of a table's catalog."""
    name: str
    declared_type: DeclaredType = DeclaredType.OTHER
    raw_type: Optional[str] = None  # Type text as reported, e.g. NUMBER(38,0)

    @property
    def is_complex(self) -> bool:
        return self.declared_type != DeclaredType.OTHER

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "declared_type": self.declared_type.value,
            "raw_type": self.raw_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColumnEntry:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            declared_type=DeclaredType(data.get("declared_type", "other")),
            raw_type=data.get("raw_type"),
        )


# Schema nodes

@dataclass(frozen=True)
class ScalarNode:
    """Passthrough node for columns with an authoritative scalar type."""
    raw_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.raw_type.lower() if self.raw_type else "scalar"}


@dataclass(frozen=True)
class ArrayNode:
    """Array shape: distinct element placeholders in order of first appearance."""
    items: Tuple[VariantNode, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "array",
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class ObjectNode:
    """Object shape: key name -> inferred node."""
    properties: Dict[str, SchemaNode] = field(default_factory=dict)

    def __hash__(self) -> int:
        # Key order does not take part in equality, so not in the hash either
        return hash(frozenset(self.properties.items()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "subtype": "json",
            "properties": {k: v.to_dict() for k, v in self.properties.items()},
        }


@dataclass(frozen=True)
class VariantNode:
    """
    Tagged value whose subtype was resolved from samples.

    ``child`` is an empty ArrayNode/ObjectNode placeholder when the subtype
    is array/object, and None otherwise. A None subtype means nothing but
    nulls (or nothing at all) was observed.
    """
    subtype: Optional[ValueKind] = None
    child: Optional[Union[ArrayNode, ObjectNode]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": "variant",
            "variantType": "JSON",
            "subtype": self.subtype.value if self.subtype else None,
        }
        if isinstance(self.child, ArrayNode):
            data["items"] = [item.to_dict() for item in self.child.items]
        elif isinstance(self.child, ObjectNode):
            data["properties"] = {k: v.to_dict() for k, v in self.child.properties.items()}
        return data


SchemaNode = Union[ScalarNode, VariantNode, ArrayNode, ObjectNode]


def schema_to_dict(schema: Dict[str, SchemaNode]) -> Dict[str, Any]:
    """Serialize an inferred table schema to the modeling-tool JSON shape."""
    return {"properties": {name: node.to_dict() for name, node in schema.items()}}


@dataclass
class ClusteringKeySegment:
    """One comma-separated part of a clustering key definition."""
    keys: List[str] = field(default_factory=list)
    expression: str = ""  # Wrapping text, column abstracted as ${name}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "clusteringKey": [{"name": key} for key in self.keys],
            "expression": self.expression,
        }


@dataclass
class InferenceConfig:
    """Configuration for a reverse-engineering run."""
    sample_limit: int = 1000
    max_depth: int = 32
    filter_nulls: bool = True
    prepare_documents: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> InferenceConfig:
        """Create from dictionary, ignoring unknown keys."""
        return cls(
            sample_limit=int(data.get("sample_limit", 1000)),
            max_depth=int(data.get("max_depth", 32)),
            filter_nulls=bool(data.get("filter_nulls", True)),
            prepare_documents=bool(data.get("prepare_documents", True)),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> InferenceConfig:
        """Load configuration from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get("inference", data))


@dataclass
class EntityPackage:
    """Everything reverse-engineered for a single table."""
    database: str
    schema: str
    table: str
    properties: Dict[str, SchemaNode] = field(default_factory=dict)
    clustering_key: Optional[List[ClusteringKeySegment]] = None
    row_count: Optional[int] = None
    documents: List[Dict[str, Any]] = field(default_factory=list)
    entity: Dict[str, Any] = field(default_factory=dict)
    container: Dict[str, Any] = field(default_factory=dict)
    is_view: bool = False

    @property
    def full_name(self) -> str:
        """Return database.schema.table."""
        return f"{self.database}.{self.schema}.{self.table}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dbName": f"{self.database}.{self.schema}",
            "collectionName": self.table,
            "documents": self.documents,
            "jsonSchema": schema_to_dict(self.properties),
            "entityLevel": {
                **self.entity,
                "clusteringKey": (
                    [s.to_dict() for s in self.clustering_key]
                    if self.clustering_key is not None else None
                ),
                "rowCount": self.row_count,
            },
            "containerLevel": self.container,
        }

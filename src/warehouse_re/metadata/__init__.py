"""
Warehouse metadata helpers.

Provides the fixture-backed tabular source, the per-container memo and the
reshaping of information_schema / stage rows and sampled documents into
the structures the modeling tool expects.
"""

from warehouse_re.metadata.container import ContainerCache, build_container_data
from warehouse_re.metadata.documents import filter_null, prepare_documents
from warehouse_re.metadata.entities import (
    build_entity_data,
    build_view_data,
    group_entity_names,
    split_entity_names,
)
from warehouse_re.metadata.naming import (
    add_quotes,
    full_entity_name,
    remove_quotes,
    split_full_name,
)
from warehouse_re.metadata.source import FixtureSource, declared_type_for

__all__ = [
    "ContainerCache",
    "build_container_data",
    "filter_null",
    "prepare_documents",
    "build_entity_data",
    "build_view_data",
    "group_entity_names",
    "split_entity_names",
    "add_quotes",
    "full_entity_name",
    "remove_quotes",
    "split_full_name",
    "FixtureSource",
    "declared_type_for",
]

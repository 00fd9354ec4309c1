"""
Reverse-engineering pipeline.

Ties a tabular metadata source to the inference engine and the clustering
key parser, producing one EntityPackage per table. Every step degrades to
an empty result on failure, so one unreadable table (or column) never
aborts the run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from warehouse_re.discovery.clustering import parse_clustering_key
from warehouse_re.inference.builder import SchemaBuilder
from warehouse_re.metadata.container import ContainerCache, build_container_data
from warehouse_re.metadata.documents import filter_null, prepare_documents
from warehouse_re.metadata.entities import (
    build_entity_data,
    build_view_data,
    group_entity_names,
)
from warehouse_re.metadata.naming import full_entity_name, split_full_name
from warehouse_re.models import (
    ClusteringKeySegment,
    ColumnEntry,
    EntityPackage,
    InferenceConfig,
)

logger = logging.getLogger(__name__)


class ReverseEngineer:
    """
    Reverse-engineers tables served by a metadata source.

    The source is any object providing list_columns, sample_rows,
    clustering_key_expression, row_count, is_view, table_info, stage_rows,
    external_row and container_rows (see FixtureSource).

    Usage:
        engineer = ReverseEngineer(FixtureSource.from_file("fixture.yaml"))
        packages = engineer.reverse_all()
    """

    def __init__(
        self,
        source: Any,
        config: Optional[InferenceConfig] = None,
        container_cache: Optional[ContainerCache] = None,
    ):
        self.source = source
        self.config = config or InferenceConfig()
        self.builder = SchemaBuilder(self.config)
        self.container_cache = container_cache or ContainerCache()

    def entity_names(self) -> List[Dict[str, Any]]:
        """Tables and views grouped by database.schema."""
        tables, views = self.source.entity_rows()
        return group_entity_names(tables, views)

    def reverse_all(
        self,
        tables: Optional[Sequence[str]] = None,
        max_workers: int = 1,
    ) -> List[EntityPackage]:
        """
        Reverse-engineer several tables.

        Args:
            tables: Full table names, all tables of the source if None
            max_workers: Number of tables processed concurrently

        Returns:
            EntityPackage list in the order of ``tables``
        """
        names = list(tables) if tables is not None else self.source.table_names()
        logger.info(f"Reverse-engineering {len(names)} tables")

        if max_workers <= 1:
            return [self.reverse_table(name) for name in names]

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.reverse_table, names))

    def reverse_table(self, full_name: str) -> EntityPackage:
        """
        Reverse-engineer a single table or view.

        Args:
            full_name: DB.SCHEMA.TABLE, parts optionally double-quoted

        Returns:
            EntityPackage; parts that could not be read are left empty, and a
            malformed name yields an empty package
        """
        try:
            database, schema, table = split_full_name(full_name)
        except ValueError as e:
            logger.error(f"Skipping {full_name}: {e}")
            return EntityPackage(database="", schema="", table=full_name)

        is_view = self._safe(lambda: self.source.is_view(full_name), False, full_name, "kind")

        columns: List[ColumnEntry] = self._safe(
            lambda: self.source.list_columns(full_name), [], full_name, "columns"
        )
        rows = self._sample(full_name)
        properties = self.builder.build(columns, rows)

        documents = prepare_documents(properties, rows) if self.config.prepare_documents else rows

        package = EntityPackage(
            database=database,
            schema=schema,
            table=table,
            properties=properties,
            row_count=self._safe(lambda: self.source.row_count(full_name), None, full_name, "row count"),
            documents=documents,
            is_view=is_view,
        )

        if is_view:
            package.entity = self._safe(
                lambda: build_view_data(self.source.table_info(full_name)), {}, full_name, "view data"
            )
        else:
            package.clustering_key = self._clustering_key(full_name, columns)
            package.entity = self._safe(
                lambda: build_entity_data(
                    self.source.table_info(full_name),
                    self.source.stage_rows(full_name),
                    self.source.external_row(full_name),
                ),
                {},
                full_name,
                "entity data",
            )

        package.container = self.container_data(f"{database}.{schema}")
        quoted_name = full_entity_name(f"{database}.{schema}", table)
        logger.debug(f"Reverse-engineered {quoted_name}: {len(properties)} columns, {len(rows)} sample rows")
        return package

    def container_data(self, container: str) -> Dict[str, Any]:
        """Container-level data, computed once per container."""
        def compute() -> Dict[str, Any]:
            rows = self.source.container_rows(container)
            return build_container_data(
                rows.get("database"),
                rows.get("schema"),
                functions=rows.get("functions") or [],
                sequences=rows.get("sequences") or [],
                file_formats=rows.get("file_formats") or [],
            )

        return self.container_cache.get_or_compute(container, compute)

    def _sample(self, full_name: str) -> List[Dict[str, Any]]:
        rows = self._safe(
            lambda: self.source.sample_rows(full_name, self.config.sample_limit), [], full_name, "sample rows"
        )
        if self.config.filter_nulls:
            rows = [filter_null(row) for row in rows]
        return rows

    def _clustering_key(
        self,
        full_name: str,
        columns: Sequence[ColumnEntry],
    ) -> Optional[List[ClusteringKeySegment]]:
        expression = self._safe(
            lambda: self.source.clustering_key_expression(full_name), None, full_name, "clustering key"
        )
        return parse_clustering_key([c.name for c in columns], expression)

    def _safe(self, fetch, default, full_name: str, what: str):
        try:
            return fetch()
        except Exception as e:
            logger.error(f"Error getting {what} for {full_name}: {e}")
            return default

"""
Tabular metadata source backed by fixture files.

Stands in for the live warehouse connection: serves column catalogs,
sample rows, clustering key text and information_schema rows for the
tables described in a YAML (or JSON) fixture. Sample rows can be inline
or read from Parquet/CSV files next to the fixture.

Fixture layout:

    tables:
      - database: DEMO
        schema: PUBLIC
        name: EVENTS
        columns:
          - {name: ID, type: "NUMBER(38,0)"}
          - {name: PAYLOAD, type: VARIANT}
        clustering_key: LINEAR(ID)
        rows: [{ID: 1, PAYLOAD: {a: 1}}]     # or sample_file: events.parquet
    containers:
      DEMO.PUBLIC:
        schema: {IS_TRANSIENT: "NO", COMMENT: "demo"}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import yaml

from warehouse_re.metadata.naming import split_full_name
from warehouse_re.models import ColumnEntry, DeclaredType

logger = logging.getLogger(__name__)


# Warehouse type mapping, anything not listed is a plain scalar
COLUMN_TYPE_MAP = {
    "VARIANT": DeclaredType.VARIANT,
    "ARRAY": DeclaredType.ARRAY,
    "OBJECT": DeclaredType.OBJECT,
}


def declared_type_for(type_name: Optional[str]) -> DeclaredType:
    """Map a warehouse column type such as ``VARIANT`` or ``NUMBER(38,0)``."""
    base_type = (type_name or "").split("(")[0].strip().upper()
    return COLUMN_TYPE_MAP.get(base_type, DeclaredType.OTHER)


def _decode_json(value: Any, scalars: bool = False) -> Any:
    """
    Parse JSON text held in a semi-structured column, if it is JSON.

    Array and object columns only decode bracketed text. Variant columns
    (``scalars=True``) also decode scalar documents such as ``42``, ``null``
    or ``"x"``. Text that is not valid JSON is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not scalars and not text.startswith(("{", "[")):
        return value
    try:
        return json.loads(text)
    except ValueError:
        return value


class FixtureSource:
    """
    Serves table metadata and samples from a fixture document.

    Table names are matched case-insensitively on ``DB.SCHEMA.TABLE``, with
    or without double-quoted parts.
    """

    def __init__(self, data: Dict[str, Any], base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self._tables: Dict[str, Dict[str, Any]] = {}
        self._containers: Dict[str, Dict[str, Any]] = {
            name.upper(): rows or {} for name, rows in (data.get("containers") or {}).items()
        }
        for table in data.get("tables") or []:
            full_name = f"{table['database']}.{table['schema']}.{table['name']}"
            self._tables[full_name.upper()] = table

    @classmethod
    def from_file(cls, path: Path) -> FixtureSource:
        """Load a fixture from a YAML or JSON file."""
        path = Path(path)
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded {len(data.get('tables') or [])} tables from {path}")
        return cls(data, base_dir=path.parent)

    def _table(self, full_name: str) -> Dict[str, Any]:
        try:
            return self._tables[".".join(split_full_name(full_name)).upper()]
        except (KeyError, ValueError):
            raise KeyError(f"Unknown table: {full_name}") from None

    def has_table(self, full_name: str) -> bool:
        try:
            self._table(full_name)
        except KeyError:
            return False
        return True

    def table_names(self) -> List[str]:
        """Full names of all tables and views, in fixture order."""
        return [
            f"{t['database']}.{t['schema']}.{t['name']}" for t in self._tables.values()
        ]

    def is_view(self, full_name: str) -> bool:
        return str(self._table(full_name).get("kind", "table")).lower() in ("view", "materialized view")

    def entity_rows(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """SHOW TABLES / SHOW VIEWS style rows: (tables, views)."""
        tables: List[Dict[str, Any]] = []
        views: List[Dict[str, Any]] = []
        for full_name, table in self._tables.items():
            row = {
                "database_name": table["database"],
                "schema_name": table["schema"],
                "name": table["name"],
            }
            (views if self.is_view(full_name) else tables).append(row)
        return tables, views

    def list_columns(self, full_name: str) -> List[ColumnEntry]:
        """Column catalog of a table (DESC TABLE)."""
        return [
            ColumnEntry(
                name=col["name"],
                declared_type=declared_type_for(col.get("type")),
                raw_type=col.get("type"),
            )
            for col in self._table(full_name).get("columns") or []
        ]

    def column_names(self, full_name: str) -> List[str]:
        return [col.name for col in self.list_columns(full_name)]

    def sample_rows(self, full_name: str, limit: int) -> List[Dict[str, Any]]:
        """
        Up to ``limit`` sampled rows of a table.

        Rows read from files have JSON text in variant/array/object columns
        decoded, the way a driver would return them.
        """
        table = self._table(full_name)
        if table.get("sample_file"):
            rows = self._read_sample_file(self.base_dir / table["sample_file"], limit)
            complex_columns = [
                (c.name, c.declared_type == DeclaredType.VARIANT)
                for c in self.list_columns(full_name)
                if c.is_complex
            ]
            for row in rows:
                for name, scalars in complex_columns:
                    if name in row:
                        row[name] = _decode_json(row[name], scalars)
            return rows
        return [dict(row) for row in (table.get("rows") or [])[:limit]]

    def _read_sample_file(self, path: Path, limit: int) -> List[Dict[str, Any]]:
        if path.suffix == ".parquet":
            df = pd.read_parquet(path)
        elif path.suffix in (".json", ".jsonl"):
            df = pd.read_json(path, lines=path.suffix == ".jsonl")
        else:
            df = pd.read_csv(path, nrows=limit)
        logger.debug(f"Read {len(df)} sample rows from {path}")
        return df.head(limit).to_dict(orient="records")

    def row_count(self, full_name: str) -> Optional[int]:
        table = self._table(full_name)
        if "row_count" in table:
            return table["row_count"]
        if table.get("rows") is not None:
            return len(table["rows"])
        return None

    def clustering_key_expression(self, full_name: str) -> Optional[str]:
        return self._table(full_name).get("clustering_key")

    def table_info(self, full_name: str) -> Dict[str, Any]:
        """information_schema.tables (or views) row."""
        return dict(self._table(full_name).get("info") or {})

    def stage_rows(self, full_name: str) -> List[Dict[str, Any]]:
        """DESCRIBE TABLE ... type = stage rows."""
        return list(self._table(full_name).get("stage") or [])

    def external_row(self, full_name: str) -> Dict[str, Any]:
        return dict(self._table(full_name).get("external") or {})

    def container_rows(self, container: str) -> Dict[str, Any]:
        """information_schema rows describing a ``DB.SCHEMA`` container."""
        return self._containers.get(container.upper(), {})

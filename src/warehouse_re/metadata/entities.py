"""
Entity listing and entity-level metadata.

Groups the rows of SHOW TABLES / SHOW VIEWS style listings into
database.schema buckets and reshapes information_schema rows into the
entity-level properties of a table.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from warehouse_re.metadata.options import (
    copy_options,
    file_format_options,
    flag_value,
    has_stage_copy_options,
)

logger = logging.getLogger(__name__)

VIEW_SUFFIX = " (v)"


def annotate_view(name: str) -> str:
    return f"{name}{VIEW_SUFFIX}"


def is_view(name: str) -> bool:
    return name.endswith(VIEW_SUFFIX)


def split_entity_names(names: Iterable[str]) -> Dict[str, List[str]]:
    """Split annotated names into views (suffix removed) and tables."""
    views: List[str] = []
    tables: List[str] = []
    for name in names:
        if is_view(name):
            views.append(name[: -len(VIEW_SUFFIX)])
        else:
            tables.append(name)
    return {"views": views, "tables": tables}


def group_entity_names(
    table_rows: Sequence[Mapping[str, Any]],
    view_rows: Sequence[Mapping[str, Any]] = (),
) -> List[Dict[str, Any]]:
    """
    Bucket listed entities by ``database.schema``.

    Args:
        table_rows: Rows with database_name, schema_name, name
        view_rows: Same shape; their names are annotated as views

    Returns:
        List of {"dbName": "<db>.<schema>", "dbCollections": [names]}
        in first-seen order
    """
    buckets: Dict[str, List[str]] = {}
    annotated = [(row, False) for row in table_rows] + [(row, True) for row in view_rows]
    for row, view in annotated:
        key = f"{row['database_name']}.{row['schema_name']}"
        name = annotate_view(row["name"]) if view else row["name"]
        buckets.setdefault(key, []).append(name)

    return [{"dbName": key, "dbCollections": names} for key, names in buckets.items()]


def external_location(location: Optional[str]) -> Dict[str, str]:
    """Split ``@stage/some/path`` into namespace and path."""
    parts = (location or "").split("/")
    path = "/".join(parts[1:])
    return {"namespace": parts[0], "path": f"/{path}" if path else ""}


def build_entity_data(
    table_row: Optional[Mapping[str, Any]],
    stage_rows: Sequence[Mapping[str, Any]] = (),
    external_row: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Reshape information_schema.tables and stage description rows into
    entity-level properties.

    The clustering key is added separately by the caller.
    """
    data = dict(table_row or {})
    external = data.get("TABLE_TYPE") == "EXTERNAL TABLE"

    stage_props = {row.get("property"): row.get("property_value") for row in stage_rows}
    file_format = str(stage_props.get("TYPE") or "").upper()

    entity: Dict[str, Any] = {}
    if external:
        entity.update(data)
        entity["location"] = external_location((external_row or {}).get("LOCATION"))
    if not file_format:
        entity["customFileFormatName"] = str(stage_props.get("FORMAT_NAME") or "").upper()
    if has_stage_copy_options(stage_rows):
        entity["stageCopyOptions"] = copy_options(stage_rows)

    entity["externalFileFormat" if external else "fileFormat"] = file_format or "custom"
    entity["external"] = external
    entity["formatTypeOptions"] = file_format_options(stage_rows)
    entity["transient"] = flag_value(data.get("IS_TRANSIENT"))
    entity["description"] = data.get("COMMENT") or ""
    return entity


def build_view_data(view_row: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Entity-level properties of a view or materialized view."""
    data = view_row or {}
    return {
        "secure": flag_value(data.get("IS_SECURE")),
        "description": data.get("COMMENT") or "",
    }

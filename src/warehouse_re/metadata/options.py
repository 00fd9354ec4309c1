"""
Stage and file format option normalisation.

Converts the property rows returned by ``DESCRIBE ... type = stage`` and
``DESCRIBE FILE FORMAT`` into the option dictionaries used by the modeling
tool.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

FILE_FORMAT_PARENT = "STAGE_FILE_FORMAT"
COPY_OPTIONS_PARENT = "STAGE_COPY_OPTIONS"

SELECT_OPTIONS = ["COMPRESSION", "BINARY_FORMAT"]
GROUP_OPTIONS = ["NULL_IF"]
CHECKBOX_OPTIONS = [
    "ERROR_ON_COLUMN_COUNT_MISMATCH",
    "VALIDATE_UTF8",
    "EMPTY_FIELD_AS_NULL",
    "ALLOW_DUPLICATE",
    "STRIP_OUTER_ARRAY",
    "STRIP_NULL_VALUES",
    "IGNORE_UTF8_ERRORS",
    "TRIM_SPACE",
    "SNAPPY_COMPRESSION",
    "BINARY_AS_TEXT",
    "PRESERVE_SPACE",
    "STRIP_OUTER_ELEMENT",
    "DISABLE_SNOWFLAKE_DATA",
    "DISABLE_AUTO_CONVERT",
    "SKIP_BYTE_ORDER_MARK",
]
NUMERIC_OPTIONS = ["SKIP_HEADER"]


def to_number(value: Any) -> Optional[float]:
    """Parse a numeric property value, None if it is not a number."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def split_list(value: str) -> List[str]:
    """Split ``[a, b]`` list text into trimmed items."""
    inner = (value or "").strip()[1:-1]
    return [item.strip() for item in inner.split(",") if item.strip()]


def _rows_for(stage_rows: Iterable[Mapping[str, Any]], parent: str) -> List[Mapping[str, Any]]:
    return [row for row in stage_rows if row.get("parent_property") == parent]


def stage_options(stage_rows: Iterable[Mapping[str, Any]], parent: str) -> Dict[str, Any]:
    """
    Convert stage property rows under ``parent`` by their property_type.

    Args:
        stage_rows: Rows with property, property_type, property_value
        parent: parent_property to select, e.g. STAGE_FILE_FORMAT

    Returns:
        Dict of property name to converted value
    """
    options: Dict[str, Any] = {}
    for row in _rows_for(stage_rows, parent):
        prop = row["property"]
        prop_type = row.get("property_type")
        value = row.get("property_value")

        if prop_type == "List":
            options[prop] = [{f"{prop}_item": item} for item in split_list(value or "")]
        elif prop_type == "Boolean":
            options[prop] = bool(value) and str(value).lower() != "false"
        elif prop_type == "Long":
            if prop == "SIZE_LIMIT":
                options["sizeLimit"] = bool(value)
            options[prop] = to_number(value)
        else:
            options[prop] = value
    return options


def file_format_options(stage_rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    return stage_options(stage_rows, FILE_FORMAT_PARENT)


def copy_options(stage_rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    return stage_options(stage_rows, COPY_OPTIONS_PARENT)


def has_stage_copy_options(stage_rows: Iterable[Mapping[str, Any]]) -> bool:
    """True if any copy option differs from its default."""
    return any(
        row.get("property_value") != row.get("property_default")
        for row in _rows_for(stage_rows, COPY_OPTIONS_PARENT)
    )


def convert_file_format_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise a named file format's options by option category."""
    converted: Dict[str, Any] = {}
    for key, raw in options.items():
        value = "" if raw is None else raw
        if key in SELECT_OPTIONS:
            converted[key] = str(value).upper()
        elif key in GROUP_OPTIONS:
            converted[key] = [{f"{key}_item": item} for item in split_list(str(value))]
        elif key in CHECKBOX_OPTIONS:
            converted[key] = value if isinstance(value, bool) else str(value).upper() != "FALSE"
        elif key in NUMERIC_OPTIONS:
            number = to_number(value)
            converted[key] = "" if number is None else number
        else:
            converted[key] = value
    return converted


def flag_value(value: Any) -> bool:
    """Interpret information_schema YES/NO style flags."""
    return bool(value) and str(value).upper() not in ("NO", "FALSE")

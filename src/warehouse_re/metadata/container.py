"""
Container (database.schema) level metadata.

Container data is the same for every table of a schema, so it is computed
once per container name and served from memory afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from warehouse_re.metadata.options import (
    convert_file_format_options,
    flag_value,
    to_number,
)

logger = logging.getLogger(__name__)


class ContainerCache:
    """
    Compute-once cache keyed by container name.

    Concurrent callers asking for the same name wait for the first
    computation instead of repeating it. Failed computations are not
    cached.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __len__(self) -> int:
        return len(self._data)

    def get_or_compute(self, name: str, compute: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        """
        Return cached data for ``name``, computing it on first request.

        Args:
            name: Container name, e.g. DB.SCHEMA
            compute: Zero-argument callable producing the container data

        Returns:
            Container data, or an empty dict if the computation failed
        """
        if name in self._data:
            return self._data[name]

        with self._guard:
            lock = self._locks.setdefault(name, threading.Lock())

        with lock:
            if name in self._data:
                return self._data[name]
            try:
                data = compute()
            except Exception as e:
                logger.error(f"Error getting container data for {name}: {e}")
                return {}
            self._data[name] = data
            logger.debug(f"Cached container data for {name}")
            return data

    def clear(self) -> None:
        with self._guard:
            self._data.clear()
            self._locks.clear()


def function_entry(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Reshape an information_schema.functions row into a UDF entry."""
    argument = row.get("ARGUMENT_SIGNATURE") or ""
    return {
        "name": row.get("FUNCTION_NAME"),
        "storedProcLanguage": str(row.get("FUNCTION_LANGUAGE") or "").lower(),
        "storedProcArgument": "" if argument == "()" else argument,
        "storedProcDataType": row.get("DATA_TYPE"),
        "storedProcFunction": row.get("FUNCTION_DEFINITION"),
        "storedProcDescription": row.get("COMMENT") or "",
    }


def sequence_entry(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Reshape an information_schema.sequences row."""
    return {
        "name": row.get("SEQUENCE_NAME"),
        "sequenceStart": to_number(row.get("START_VALUE")) or 1,
        "sequenceIncrement": to_number(row.get("INCREMENT")) or 1,
        "sequenceComments": row.get("COMMENT") or "",
    }


def file_format_entry(
    row: Mapping[str, Any],
    properties: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Reshape an information_schema.file_formats row plus its DESCRIBE properties."""
    options = {**row, **(properties or {})}
    return {
        "name": row.get("FILE_FORMAT_NAME"),
        "fileFormat": str(row.get("FILE_FORMAT_TYPE") or "").upper(),
        "formatTypeOptions": convert_file_format_options(options),
        "fileFormatComments": row.get("COMMENT") or "",
    }


def build_container_data(
    database_row: Optional[Mapping[str, Any]],
    schema_row: Optional[Mapping[str, Any]],
    functions: Sequence[Mapping[str, Any]] = (),
    sequences: Sequence[Mapping[str, Any]] = (),
    file_formats: Sequence[Mapping[str, Any]] = (),
) -> Dict[str, Any]:
    """
    Assemble container-level data from information_schema rows.

    ``file_formats`` rows may carry a ``properties`` mapping with the
    DESCRIBE FILE FORMAT output for that format.
    """
    database_row = database_row or {}
    schema_row = schema_row or {}
    formats: List[Dict[str, Any]] = []
    for row in file_formats:
        properties = row.get("properties")
        base = {k: v for k, v in row.items() if k != "properties"}
        formats.append(file_format_entry(base, properties))

    return {
        "transient": flag_value(schema_row.get("IS_TRANSIENT")),
        "description": schema_row.get("COMMENT") or database_row.get("COMMENT") or "",
        "DATA_RETENTION_TIME_IN_DAYS": schema_row.get("RETENTION_TIME") or 0,
        "managedAccess": flag_value(schema_row.get("IS_MANAGED_ACCESS")),
        "UDFs": [function_entry(row) for row in functions],
        "sequences": [sequence_entry(row) for row in sequences],
        "fileFormats": formats,
    }

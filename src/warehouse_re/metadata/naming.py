"""Identifier quoting and full entity name helpers."""

from __future__ import annotations

import re
from typing import Tuple

# One identifier: a double-quoted run (with "" escapes) or anything up to a dot
_PART_PATTERN = re.compile(r'"(?:[^"]|"")*"|[^.]+')


def add_quotes(name: str) -> str:
    """Double-quote an identifier unless it already is."""
    if name.startswith('"') and name.endswith('"') and len(name) > 1:
        return name
    return f'"{name}"'


def remove_quotes(name: str) -> str:
    """Strip one pair of enclosing double quotes."""
    if name and len(name) > 1 and name.startswith('"') and name.endswith('"'):
        return name[1:-1]
    return name or ""


def full_entity_name(schema_name: str, table_name: str) -> str:
    """Quote each part of ``db.schema`` and append the quoted table name."""
    parts = [add_quotes(part) for part in schema_name.split(".")]
    parts.append(add_quotes(table_name))
    return ".".join(parts)


def split_full_name(full_name: str) -> Tuple[str, str, str]:
    """
    Split ``DB.SCHEMA.TABLE`` into its unquoted parts.

    Quoted parts may contain dots, e.g. ``"DB"."my.schema"."T"``.

    Raises:
        ValueError: If the name does not have exactly three parts
    """
    text = (full_name or "").strip()
    parts = _PART_PATTERN.findall(text)
    if len(parts) != 3 or ".".join(parts) != text:
        raise ValueError(f"Expected DB.SCHEMA.TABLE, got {full_name!r}")
    database, schema, table = (remove_quotes(part.strip()) for part in parts)
    return database, schema, table

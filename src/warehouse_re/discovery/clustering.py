"""
Clustering key parser.

Decomposes a clustering key definition as reported by the warehouse, e.g.
``LINEAR(A, SUBSTRING(B, 1, 3))``, into an ordered list of segments, each
naming the referenced column(s) plus any wrapping expression with the column
abstracted to ``${name}``.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from warehouse_re.models import ClusteringKeySegment

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "${name}"


class ClusteringKeyParser:
    """
    Parses clustering key expressions against a table's column names.

    Supports:
    - ``LINEAR(...)`` and bare ``(...)`` wrappers
    - Quoted and database/schema qualified column references
    - Variant paths (``col:field``)
    - Function-call expressions wrapping a single column

    Text that resolves to no known column is merged into the previous
    segment's expression, so a comma inside a function call (which the
    top-level split does not see) ends up back in the expression it
    belongs to.
    """

    LINEAR_PATTERN = re.compile(r'^LINEAR\s*(?=\()', re.IGNORECASE)

    BRACKETS_PATTERN = re.compile(r'^\((.*)\)$', re.DOTALL)

    QUOTES_PATTERN = re.compile(r'^"(.*)"$', re.DOTALL)

    TOKEN_PATTERN = re.compile(r'^([^\s)]+)')

    def __init__(self, column_names: Iterable[str]):
        self.column_names = list(column_names)
        self._by_upper = {}
        for name in self.column_names:
            self._by_upper.setdefault(name.upper(), name)

    def parse(self, expression: Optional[str]) -> Optional[List[ClusteringKeySegment]]:
        """
        Parse a clustering key expression.

        Args:
            expression: Raw clustering key text, may be None or empty

        Returns:
            Ordered list of segments, or None if there is no expression
        """
        if not expression or not expression.strip():
            return None

        body = self._strip_wrappers(expression)
        segments: List[ClusteringKeySegment] = []

        for item in body.split(','):
            segment = self._parse_item(item)
            if segment is not None:
                segments.append(segment)
                continue

            if not segments:
                logger.debug(f"Dropping unresolved clustering key text: {item.strip()!r}")
                continue

            previous = segments[-1]
            merged = f"{previous.expression},{item}" if previous.expression else item
            previous.expression = merged.strip()

        return segments

    def _strip_wrappers(self, expression: str) -> str:
        """Remove a leading LINEAR keyword and one pair of enclosing brackets."""
        body = self.LINEAR_PATTERN.sub('', expression.strip())
        match = self.BRACKETS_PATTERN.match(body)
        if match:
            body = match.group(1)
        return body

    def _parse_item(self, item: str) -> Optional[ClusteringKeySegment]:
        """
        Resolve the column references of one top-level item.

        Returns:
            Segment, or None if no column could be resolved
        """
        keys: List[str] = []
        expression = ''

        for argument in item.split('('):
            token_match = self.TOKEN_PATTERN.match(argument.strip())
            column = token = reference = None
            if token_match:
                token = token_match.group(1)
                reference = token.split(':')[0]
                column = self._resolve(self._identifier(reference))

            if column is None:
                expression = f"{expression}({argument}" if expression else argument
                continue

            keys.append(column)
            if '(' not in item and token == item.strip() and reference == token:
                # Bare (possibly quoted or qualified) column reference
                continue

            wrapped = argument.replace(reference, NAME_PLACEHOLDER, 1)
            expression = f"{expression}({wrapped}" if expression else wrapped

        if not keys:
            return None

        return ClusteringKeySegment(keys=keys, expression=expression.strip())

    def _identifier(self, reference: str) -> str:
        """Reduce ``db.schema."col"`` to ``col``."""
        return self._remove_quotes(reference.split('.')[-1])

    def _remove_quotes(self, text: str) -> str:
        match = self.QUOTES_PATTERN.match(text)
        return match.group(1) if match else text

    def _resolve(self, name: str) -> Optional[str]:
        """Case-insensitive lookup of a known column name."""
        return self._by_upper.get(name.upper())


def parse_clustering_key(
    column_names: Iterable[str],
    expression: Optional[str],
) -> Optional[List[ClusteringKeySegment]]:
    """
    Convenience function to parse a clustering key expression.

    Args:
        column_names: Known column names of the table
        expression: Raw clustering key text

    Returns:
        Ordered list of ClusteringKeySegment, or None for an empty expression
    """
    return ClusteringKeyParser(column_names).parse(expression)

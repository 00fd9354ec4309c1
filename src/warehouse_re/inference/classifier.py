"""
Value classification for sampled warehouse values.

Sample rows may come straight from a driver (plain Python values) or through
pandas (numpy scalars and arrays, NaN/NaT for missing values), so both are
recognised here.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

import numpy as np
import pandas as pd

from warehouse_re.models import ValueKind


def is_null(value: Any) -> bool:
    """Return True for None and the pandas/numpy missing-value markers."""
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple, np.ndarray))


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def classify_value(value: Any) -> ValueKind:
    """
    Classify a single runtime value into a ValueKind.

    Never raises; values of unrecognised types classify as UNKNOWN.
    """
    if is_null(value):
        return ValueKind.NULL
    if is_array(value):
        return ValueKind.ARRAY
    if is_mapping(value):
        return ValueKind.OBJECT
    # bool is a subclass of int
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float, Decimal, np.number)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, (datetime, date, time, pd.Timestamp, np.datetime64)):
        return ValueKind.TIMESTAMP
    return ValueKind.UNKNOWN

"""
Cell values and their conversions.

Records carry dynamically typed scalars. Every cell is classified into one
closed set of kinds (``ValueKind``) before any analysis touches it, so the
type inferencer and the statistics never rely on implicit coercion.
"""
import enum
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

Value = Union[int, float, str, bool, date, datetime, None]
Record = Mapping[str, Value]

_HAS_DIGIT = re.compile(r'\d')


class ValueKind(enum.Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    NULL = "null"


def is_missing(value: Any) -> bool:
    """None, NaN, NaT and blank strings count as missing cells."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, str):
        return not value.strip()
    return False


def classify_value(value: Any) -> ValueKind:
    if is_missing(value):
        return ValueKind.NULL
    # bool is a subclass of int; check it first
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float, np.integer, np.floating)):
        return ValueKind.NUMBER
    if isinstance(value, (date, datetime, pd.Timestamp, np.datetime64)):
        return ValueKind.DATE
    return ValueKind.STRING


def to_number(value: Any) -> Optional[float]:
    """Return the finite float a cell represents, or None."""
    kind = classify_value(value)
    if kind is ValueKind.BOOLEAN:
        return 1.0 if value else 0.0
    if kind is ValueKind.NUMBER:
        number = float(value)
    elif kind is ValueKind.STRING:
        text = str(value).strip()
        if '_' in text:
            return None
        try:
            number = float(text)
        except (TypeError, ValueError):
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_datetime(value: Any) -> Optional[pd.Timestamp]:
    """Return a naive timestamp for date-like cells, or None."""
    kind = classify_value(value)
    if kind is ValueKind.STRING:
        # lists and other containers never hold a single date
        if not isinstance(value, str) or not _HAS_DIGIT.search(value):
            return None
    elif kind is not ValueKind.DATE:
        return None
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug(f"Could not parse date value {value!r}: {e}")
        return None
    if not isinstance(parsed, pd.Timestamp) or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed


def to_display_str(value: Any) -> str:
    """String form used for category labels and distribution keys."""
    kind = classify_value(value)
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        number = float(value)
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return str(value)
    if kind is ValueKind.DATE:
        if isinstance(value, np.datetime64):
            return pd.Timestamp(value).isoformat()
        return value.isoformat()
    return str(value)


def distinct_key(value: Any) -> Hashable:
    """Identity used for uniqueness: True != 1, but 1 == 1.0."""
    kind = classify_value(value)
    if kind is ValueKind.NUMBER:
        return (kind, float(value))
    if kind is ValueKind.BOOLEAN:
        return (kind, bool(value))
    if kind is ValueKind.NULL:
        return (kind, None)
    try:
        hash(value)
    except TypeError:
        return (kind, repr(value))
    return (kind, value)


def row_key(record: Mapping[str, Any]) -> Tuple:
    """Order-independent identity of a whole record."""
    return tuple(sorted(((str(k), distinct_key(v)) for k, v in record.items()), key=lambda item: item[0]))


def column_values(rows: Sequence[Mapping[str, Any]], name: str) -> List[Any]:
    """Non-missing values of a column, in row order."""
    return [row.get(name) for row in rows if not is_missing(row.get(name))]


def numeric_values(rows: Sequence[Mapping[str, Any]], name: str) -> List[float]:
    """Numbers of a column, in row order; cells that are not numbers are skipped."""
    numbers = []
    for row in rows:
        number = to_number(row.get(name))
        if number is not None:
            numbers.append(number)
    return numbers


def count_distinct(values: Sequence[Any]) -> int:
    """
    Number of distinct values under `distinct_key`.

    pandas `nunique` would merge True with 1, so values are keyed by kind first.
    """
    return len({distinct_key(v) for v in values})


def value_counts(values: Sequence[Any]) -> Dict[str, int]:
    """
    Occurrences per string form, in first-seen order.

    pandas `value_counts` orders by frequency and would merge True with 1.
    """
    counts: Dict[str, int] = {}
    for value in values:
        key = to_display_str(value)
        counts[key] = counts.get(key, 0) + 1
    return counts

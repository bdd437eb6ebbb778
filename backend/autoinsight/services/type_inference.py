"""
Column type inference.

Classifies the non-missing values of one column as boolean, numeric,
datetime, categorical or text. Rules are evaluated in that order and the
first one that holds wins.
"""
import logging
from typing import Any, Sequence

from autoinsight.core.constants import (
    CATEGORICAL_MAX_UNIQUE,
    CATEGORICAL_MAX_UNIQUE_RATIO,
    TYPE_DETECTION_THRESHOLD,
)
from autoinsight.core.schemas import ColumnType
from autoinsight.services.values import (
    ValueKind,
    classify_value,
    count_distinct,
    to_datetime,
    to_number,
)

logger = logging.getLogger(__name__)


def is_boolean_like(value: Any) -> bool:
    """Booleans, the strings "true"/"false", and the numbers 0 and 1."""
    kind = classify_value(value)
    if kind is ValueKind.BOOLEAN:
        return True
    if kind is ValueKind.STRING:
        return value in ("true", "false")
    if kind is ValueKind.NUMBER:
        return value == 0 or value == 1
    return False


def is_numeric_like(value: Any) -> bool:
    return to_number(value) is not None


def is_datetime_like(value: Any) -> bool:
    return to_datetime(value) is not None


def _share(values: Sequence[Any], predicate) -> float:
    return sum(1 for v in values if predicate(v)) / len(values)


def infer_column_type(values: Sequence[Any]) -> ColumnType:
    """
    Infer the type of a column from its non-missing values.

    Args:
        values: Observed values with missing cells already removed

    Returns:
        One of 'boolean', 'numeric', 'datetime', 'categorical', 'text'
    """
    if not values:
        return 'text'

    if _share(values, is_boolean_like) >= TYPE_DETECTION_THRESHOLD:
        return 'boolean'

    if _share(values, is_numeric_like) >= TYPE_DETECTION_THRESHOLD:
        return 'numeric'

    if _share(values, is_datetime_like) >= TYPE_DETECTION_THRESHOLD:
        return 'datetime'

    unique_count = count_distinct(values)
    if unique_count <= min(CATEGORICAL_MAX_UNIQUE, len(values) * CATEGORICAL_MAX_UNIQUE_RATIO):
        return 'categorical'

    return 'text'

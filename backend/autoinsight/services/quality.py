"""
Dataset-level quality metrics: completeness, duplicate rows and IQR outliers.
"""
import logging
from typing import Any, Dict, List, Mapping, Sequence

from autoinsight.core.schemas import ColumnStats, DataColumn, DataQuality
from autoinsight.services.statistics import iqr_bounds
from autoinsight.services.values import row_key

logger = logging.getLogger(__name__)


def calculate_completeness(total_rows: int, columns: Sequence[DataColumn]) -> float:
    """1 - missing cells / all cells. A dataset without columns is complete."""
    total_cells = total_rows * len(columns)
    if total_cells == 0:
        return 1.0
    null_cells = sum(c.null_count for c in columns)
    return 1 - null_cells / total_cells


def count_duplicate_rows(rows: Sequence[Mapping[str, Any]]) -> int:
    """Count records equal to an earlier record; first occurrences are not counted."""
    seen = set()
    duplicates = 0
    for row in rows:
        key = row_key(row)
        if key in seen:
            duplicates += 1
        else:
            seen.add(key)
    return duplicates


def count_outliers(values: Sequence[float], stats: ColumnStats) -> int:
    """Values outside [q1 - 1.5 IQR, q3 + 1.5 IQR]."""
    lower, upper = iqr_bounds(stats.q1, stats.q3)
    return sum(1 for v in values if v < lower or v > upper)


def count_upper_outliers(values: Sequence[float], stats: ColumnStats) -> int:
    """Values above q3 + 1.5 IQR only."""
    _, upper = iqr_bounds(stats.q1, stats.q3)
    return sum(1 for v in values if v > upper)


def analyze_quality(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[DataColumn],
    numeric_columns: Dict[str, List[float]],
) -> DataQuality:
    """
    Compute the quality block of a profile.

    Args:
        rows: The raw records
        columns: Profiled columns (null counts already known)
        numeric_columns: Numbers per numeric column that has stats

    Returns:
        DataQuality with completeness, duplicate_rows and outliers
    """
    outliers = 0
    for column in columns:
        if column.stats is None or column.name not in numeric_columns:
            continue
        outliers += count_outliers(numeric_columns[column.name], column.stats)

    quality = DataQuality(
        completeness=calculate_completeness(len(rows), columns),
        duplicate_rows=count_duplicate_rows(rows),
        outliers=outliers,
    )
    logger.debug(
        f"Quality: completeness={quality.completeness:.3f}, "
        f"duplicates={quality.duplicate_rows}, outliers={quality.outliers}"
    )
    return quality

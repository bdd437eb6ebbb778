"""
Descriptive statistics, skewness and correlation for numeric columns.

Quartiles use nearest-rank selection on the sorted values (index
floor(n * p)), not interpolation, and variance is the population variance.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from autoinsight.core.constants import (
    IQR_MULTIPLIER,
    MODERATE_CORRELATION,
    Q1_POSITION,
    Q3_POSITION,
    STRONG_CORRELATION,
)
from autoinsight.core.schemas import ColumnStats, Correlation, CorrelationStrength

logger = logging.getLogger(__name__)


def median_of_sorted(sorted_values: Sequence[float]) -> float:
    n = len(sorted_values)
    if n % 2 == 0:
        return (sorted_values[n // 2 - 1] + sorted_values[n // 2]) / 2
    return sorted_values[n // 2]


def nearest_rank_quartiles(sorted_values: Sequence[float]) -> Tuple[float, float]:
    n = len(sorted_values)
    return sorted_values[math.floor(n * Q1_POSITION)], sorted_values[math.floor(n * Q3_POSITION)]


def iqr_bounds(q1: float, q3: float) -> Tuple[float, float]:
    """Lower and upper fences at 1.5 x IQR beyond the quartiles."""
    iqr = q3 - q1
    return q1 - IQR_MULTIPLIER * iqr, q3 + IQR_MULTIPLIER * iqr


def calculate_statistics(values: Sequence[float]) -> Optional[ColumnStats]:
    """
    Compute min/max/mean/median/std/q1/q3 of a numeric sequence.

    Returns None for an empty sequence.
    """
    if len(values) == 0:
        return None

    arr = np.asarray(values, dtype=float)
    sorted_values = np.sort(arr).tolist()
    q1, q3 = nearest_rank_quartiles(sorted_values)

    return ColumnStats(
        min=sorted_values[0],
        max=sorted_values[-1],
        mean=float(arr.mean()),
        median=float(median_of_sorted(sorted_values)),
        std=float(arr.std()),  # ddof=0
        q1=q1,
        q3=q3,
    )


def calculate_skewness(values: Sequence[float]) -> float:
    """
    Population skewness: mean of ((x - mean) / std) ** 3.

    Zero when there are no values or no spread.
    """
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    std = arr.std()
    if std == 0:
        return 0.0
    return float(np.mean(((arr - arr.mean()) / std) ** 3))


def quick_skewness(stats: ColumnStats) -> float:
    """(mean - median) / std, the cheap shape estimate used for chart captions."""
    if stats.std == 0:
        return 0.0
    return (stats.mean - stats.median) / stats.std


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation over the first min(len(x), len(y)) positions.

    Values are paired by position, so callers pass each column's numbers
    after removing its own missing cells. Returns 0 with fewer than two
    pairs or a zero denominator.
    """
    n = min(len(x), len(y))
    if n < 2:
        return 0.0

    xs = np.asarray(x[:n], dtype=float)
    ys = np.asarray(y[:n], dtype=float)

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_x2 = (xs * xs).sum()
    sum_y2 = (ys * ys).sum()

    numerator = n * sum_xy - sum_x * sum_y
    radicand = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if radicand <= 0:
        return 0.0
    denominator = math.sqrt(radicand)
    if denominator == 0:
        return 0.0

    # rounding can push |r| a hair past 1
    return float(max(-1.0, min(1.0, numerator / denominator)))


def correlation_strength(correlation: float) -> CorrelationStrength:
    magnitude = abs(correlation)
    if magnitude > STRONG_CORRELATION:
        return 'strong'
    if magnitude > MODERATE_CORRELATION:
        return 'moderate'
    return 'weak'


def calculate_correlations(numeric_columns: Dict[str, List[float]]) -> List[Correlation]:
    """
    Correlate every unordered pair of numeric columns, in column order.

    Pairs where either column has fewer than two numbers are left out.
    """
    names = list(numeric_columns)
    correlations = []

    for i, col1 in enumerate(names):
        for col2 in names[i + 1:]:
            values1 = numeric_columns[col1]
            values2 = numeric_columns[col2]
            if len(values1) < 2 or len(values2) < 2:
                logger.debug(f"Skipping correlation {col1}/{col2}: not enough values")
                continue

            correlation = pearson_correlation(values1, values2)
            correlations.append(Correlation(
                col1=col1,
                col2=col2,
                correlation=correlation,
                strength=correlation_strength(correlation),
            ))

    return correlations

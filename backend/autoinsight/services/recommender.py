"""
Chart recommendation service.

This module turns a dataset profile and its raw records into a ranked list
of chart recommendations using deterministic rules. Each recommendation
carries chart-ready aggregate data and a few short captions; rendering is
left to the consumer.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from autoinsight.core.constants import (
    BAR_MAX_CATEGORIES,
    BAR_MAX_UNIQUE,
    BOX_MAX_UNIQUE,
    CROSS_TAB_MAX_COLUMNS,
    HEATMAP_OUTLIER_SIGMA,
    HIGH_IMBALANCE_RATIO,
    HISTOGRAM_MAX_BUCKETS,
    LINE_ANOMALY_SIGMA,
    LINE_MAX_POINTS,
    MODERATE_IMBALANCE_RATIO,
    NORMAL_SKEW_BAND,
    PIE_DOMINANT_SHARE,
    PIE_MAJORITY_SHARE,
    PIE_MAX_SLICES,
    PIE_MAX_UNIQUE,
    PRIORITY_BAR,
    PRIORITY_BOX,
    PRIORITY_HEATMAP,
    PRIORITY_HISTOGRAM,
    PRIORITY_LINE,
    PRIORITY_PIE,
    PRIORITY_SCATTER,
    PRIORITY_SCATTER_STRONG,
    SCATTER_MAX_POINTS,
    SCATTER_MIN_CORRELATION,
    SCATTER_MIN_POINTS,
    SEASONALITY_MIN_POINTS,
    SEASONALITY_PEAK_SHARE,
    TREND_MIN_POINTS,
    TREND_STABLE_PERCENT,
)
from autoinsight.core.performance import track_performance
from autoinsight.core.schemas import (
    ChartRecommendation,
    ColumnStats,
    Correlation,
    DataColumn,
    DataProfile,
)
from autoinsight.services.statistics import calculate_statistics, iqr_bounds, quick_skewness
from autoinsight.services.values import (
    is_missing,
    numeric_values,
    to_datetime,
    to_display_str,
    to_number,
)

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown"

Rows = Sequence[Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Chart data
# ---------------------------------------------------------------------------

def create_histogram(values: Sequence[float]) -> List[Dict[str, Any]]:
    """
    Bucket values into min(20, ceil(sqrt(n))) equal-width bins.

    With no spread every value lands in the first bin.
    """
    if not values:
        return []

    low = min(values)
    high = max(values)
    bucket_count = min(HISTOGRAM_MAX_BUCKETS, math.ceil(math.sqrt(len(values))))
    width = (high - low) / bucket_count

    counts = [0] * bucket_count
    for value in values:
        index = 0 if width == 0 else min(math.floor((value - low) / width), bucket_count - 1)
        counts[index] += 1

    bins = []
    for i, count in enumerate(counts):
        bin_min = low + i * width
        bin_max = low + (i + 1) * width
        bins.append({
            "name": f"{bin_min:.1f}-{bin_max:.1f}",
            "value": count,
            "min": bin_min,
            "max": bin_max,
        })
    return bins


def create_category_counts(column: DataColumn, total_rows: int) -> List[Dict[str, Any]]:
    """Top categories by count with their share of all rows."""
    ranked = sorted(column.distribution.items(), key=lambda item: item[1], reverse=True)
    return [
        {"name": name, "value": count, "percentage": round(count / total_rows * 100, 1)}
        for name, count in ranked[:BAR_MAX_CATEGORIES]
    ]


def create_time_series(rows: Rows, date_column: str, value_column: str) -> List[Dict[str, Any]]:
    """Rows with both fields present, sorted by date, capped at 100 points."""
    points = []
    for row in rows:
        raw_date = row.get(date_column)
        raw_value = row.get(value_column)
        if is_missing(raw_date) or is_missing(raw_value):
            continue
        timestamp = to_datetime(raw_date)
        value = to_number(raw_value)
        if timestamp is None or value is None:
            continue
        points.append((timestamp, value))

    if not points:
        return []

    frame = pd.DataFrame(points, columns=["date", "value"])
    frame = frame.sort_values("date", kind="mergesort").head(LINE_MAX_POINTS)

    return [
        {
            "name": timestamp.strftime("%Y-%m-%d"),
            "value": float(value),
            "date": timestamp.isoformat(),
        }
        for timestamp, value in zip(frame["date"], frame["value"])
    ]


def create_scatter_plot(rows: Rows, x_column: str, y_column: str) -> List[Dict[str, Any]]:
    """Paired numbers from rows where both fields are present, capped at 500."""
    points = []
    for row in rows:
        raw_x = row.get(x_column)
        raw_y = row.get(y_column)
        if is_missing(raw_x) or is_missing(raw_y):
            continue
        x = to_number(raw_x)
        y = to_number(raw_y)
        if x is None or y is None:
            continue
        points.append({"x": x, "y": y, "name": f"{to_display_str(raw_x)}, {to_display_str(raw_y)}"})
        if len(points) >= SCATTER_MAX_POINTS:
            break
    return points


def _category_frame(rows: Rows, category_column: str, value_column: str) -> pd.DataFrame:
    pairs = []
    for row in rows:
        value = to_number(row.get(value_column))
        if value is None:
            continue
        raw_category = row.get(category_column)
        category = UNKNOWN_CATEGORY if is_missing(raw_category) else to_display_str(raw_category)
        pairs.append((category, value))
    return pd.DataFrame(pairs, columns=["category", "value"])


def create_heatmap(rows: Rows, category_column: str, value_column: str) -> List[Dict[str, Any]]:
    """Average, count, min and max of a numeric column per category."""
    frame = _category_frame(rows, category_column, value_column)
    if frame.empty:
        return []

    summary = frame.groupby("category", sort=False)["value"].agg(["mean", "count", "min", "max"])
    return [
        {
            "category": category,
            "average": float(row["mean"]),
            "count": int(row["count"]),
            "min": float(row["min"]),
            "max": float(row["max"]),
        }
        for category, row in summary.iterrows()
    ]


def create_box_plot(rows: Rows, category_column: str, value_column: str) -> List[Dict[str, Any]]:
    """Five-number summary and IQR outliers of a numeric column per category."""
    frame = _category_frame(rows, category_column, value_column)
    if frame.empty:
        return []

    boxes = []
    for category, group in frame.groupby("category", sort=False)["value"]:
        values = sorted(group.tolist())
        stats = calculate_statistics(values)
        lower, upper = iqr_bounds(stats.q1, stats.q3)
        boxes.append({
            "category": category,
            "min": stats.min,
            "q1": stats.q1,
            "median": stats.median,
            "q3": stats.q3,
            "max": stats.max,
            "outliers": [v for v in values if v < lower or v > upper],
        })
    return boxes


# ---------------------------------------------------------------------------
# Captions
# ---------------------------------------------------------------------------

def analyze_distribution(stats: ColumnStats) -> str:
    skewness = quick_skewness(stats)
    if abs(skewness) < NORMAL_SKEW_BAND:
        return "Distribution appears roughly normal"
    if skewness > NORMAL_SKEW_BAND:
        return "Right-skewed distribution (tail extends right)"
    return "Left-skewed distribution (tail extends left)"


def analyze_categorical_distribution(distribution: Dict[str, int]) -> str:
    counts = list(distribution.values())
    if not counts:
        return ""
    ratio = max(counts) / min(counts)
    if ratio > HIGH_IMBALANCE_RATIO:
        return "Highly imbalanced distribution"
    if ratio > MODERATE_IMBALANCE_RATIO:
        return "Moderately imbalanced distribution"
    return "Relatively balanced distribution"


def analyze_pie_distribution(data: List[Dict[str, Any]]) -> str:
    total = sum(d["value"] for d in data)
    if total == 0:
        return ""
    share = data[0]["value"] / total * 100
    if share > PIE_DOMINANT_SHARE:
        return "One category dominates the distribution"
    if share > PIE_MAJORITY_SHARE:
        return "Distribution has a clear majority category"
    return "Distribution is relatively even across categories"


def analyze_trend(data: List[Dict[str, Any]]) -> str:
    """Compare the mean of the first half of a series with the second half."""
    if len(data) < TREND_MIN_POINTS:
        return "Insufficient data for trend analysis"

    values = [d["value"] for d in data]
    middle = len(values) // 2
    first_avg = float(np.mean(values[:middle]))
    second_avg = float(np.mean(values[middle:]))

    if first_avg == 0:
        if second_avg == 0:
            return "Stable trend with minimal change"
        return "Upward trend" if second_avg > 0 else "Downward trend"

    change = (second_avg - first_avg) / first_avg * 100
    if abs(change) < TREND_STABLE_PERCENT:
        return "Stable trend with minimal change"
    if change > 0:
        return f"Upward trend (+{change:.1f}%)"
    return f"Downward trend ({change:.1f}%)"


def detect_seasonality(data: List[Dict[str, Any]]) -> str:
    """Flag a series whose local peaks exceed 10% of its points."""
    if len(data) < SEASONALITY_MIN_POINTS:
        return ""
    values = [d["value"] for d in data]
    peaks = sum(
        1 for i in range(1, len(values) - 1)
        if values[i] > values[i - 1] and values[i] > values[i + 1]
    )
    if peaks > len(values) * SEASONALITY_PEAK_SHARE:
        return "Potential cyclical pattern detected"
    return ""


def identify_anomalies(data: List[Dict[str, Any]]) -> str:
    if not data:
        return ""
    values = np.asarray([d["value"] for d in data], dtype=float)
    deviation = np.abs(values - values.mean())
    anomalies = int((deviation > LINE_ANOMALY_SIGMA * values.std()).sum())
    if anomalies > 0:
        return f"{anomalies} potential anomalies detected"
    return ""


def interpret_correlation(correlation: Correlation) -> str:
    positive = correlation.correlation > 0
    if correlation.strength == 'strong':
        if positive:
            return "Strong positive relationship - variables move together"
        return "Strong negative relationship - variables move in opposite directions"
    if correlation.strength == 'moderate':
        return "Moderate positive relationship" if positive else "Moderate negative relationship"
    return "Weak relationship between variables"


def analyze_scatter_pattern(data: List[Dict[str, Any]]) -> str:
    if len(data) < SCATTER_MIN_POINTS:
        return "Limited data points for pattern analysis"
    xs = [d["x"] for d in data]
    ys = [d["y"] for d in data]
    if max(xs) - min(xs) == 0 or max(ys) - min(ys) == 0:
        return "Data shows constant values in one dimension"
    return "Scatter pattern suggests potential relationship"


def analyze_heatmap_pattern(data: List[Dict[str, Any]], category_column: str, value_column: str) -> str:
    averages = [d["average"] for d in data]
    highest = max(averages)
    lowest = min(averages)
    if highest - lowest == 0:
        return f"{value_column} values are consistent across all {category_column} categories"

    highest_category = next(d["category"] for d in data if d["average"] == highest)
    lowest_category = next(d["category"] for d in data if d["average"] == lowest)
    return (
        f"Highest {value_column}: {highest_category} ({highest:.2f}), "
        f"Lowest: {lowest_category} ({lowest:.2f})"
    )


def identify_heatmap_outliers(data: List[Dict[str, Any]]) -> str:
    averages = np.asarray([d["average"] for d in data], dtype=float)
    deviation = np.abs(averages - averages.mean())
    unusual = int((deviation > HEATMAP_OUTLIER_SIGMA * averages.std()).sum())
    if unusual > 0:
        return f"{unusual} categories show unusual values"
    return ""


def analyze_box_plot_variation(data: List[Dict[str, Any]]) -> str:
    medians = [d["median"] for d in data]
    spreads = [d["max"] - d["min"] for d in data]
    if max(medians) - min(medians) > sum(spreads) / len(spreads):
        return "Significant variation in central values across categories"
    return "Similar central tendencies with varying spreads"


def identify_box_plot_outliers(data: List[Dict[str, Any]]) -> str:
    total = sum(len(d["outliers"]) for d in data)
    if total > 0:
        return f"{total} outliers detected across categories"
    return ""


# ---------------------------------------------------------------------------
# Candidate families
# ---------------------------------------------------------------------------

def _histogram_candidates(profile: DataProfile, rows: Rows) -> List[ChartRecommendation]:
    candidates = []
    for col in profile.columns_of_type('numeric'):
        if col.stats is None:
            continue
        stats = col.stats
        candidates.append(ChartRecommendation(
            id=f"histogram-{col.name}",
            title=f"Distribution of {col.name}",
            type="histogram",
            data=create_histogram(numeric_values(rows, col.name)),
            insights=[
                f"Mean: {stats.mean:.2f}",
                f"Standard Deviation: {stats.std:.2f}",
                f"Range: {to_display_str(stats.min)} - {to_display_str(stats.max)}",
                analyze_distribution(stats),
            ],
            priority=PRIORITY_HISTOGRAM,
            columns=[col.name],
            description=f"Shows the frequency distribution of {col.name} values",
        ))
    return candidates


def _categorical_candidates(profile: DataProfile, categorical: List[DataColumn]) -> List[ChartRecommendation]:
    candidates = []
    total_rows = profile.total_rows
    for col in categorical:
        if col.distribution is None:
            continue
        bar_data = create_category_counts(col, total_rows)
        top = bar_data[0]
        coverage = (total_rows - col.null_count) / total_rows * 100

        candidates.append(ChartRecommendation(
            id=f"bar-{col.name}",
            title=f"{col.name} Distribution",
            type="bar",
            data=bar_data,
            insights=[
                f"{col.unique_values} unique categories",
                f"Top category: {top['name']} ({top['percentage']:.1f}%)",
                f"Data coverage: {coverage:.1f}%",
                analyze_categorical_distribution(col.distribution),
            ],
            priority=PRIORITY_BAR,
            columns=[col.name],
            description=f"Distribution of categories in {col.name}",
        ))

        if col.unique_values <= PIE_MAX_UNIQUE:
            pie_data = bar_data[:PIE_MAX_SLICES]
            candidates.append(ChartRecommendation(
                id=f"pie-{col.name}",
                title=f"{col.name} Composition",
                type="pie",
                data=pie_data,
                insights=[
                    f"{col.unique_values} categories shown",
                    f"Largest segment: {top['percentage']:.1f}%",
                    analyze_pie_distribution(pie_data),
                ],
                priority=PRIORITY_PIE,
                columns=[col.name],
                description=f"Proportional breakdown of {col.name}",
            ))
    return candidates


def _time_series_candidates(profile: DataProfile, rows: Rows, numeric: List[DataColumn]) -> List[ChartRecommendation]:
    candidates = []
    for date_col in profile.columns_of_type('datetime'):
        for num_col in numeric:
            series = create_time_series(rows, date_col.name, num_col.name)
            if len(series) <= 1:
                continue
            insights = [
                f"{len(series)} data points",
                analyze_trend(series),
                detect_seasonality(series),
                identify_anomalies(series),
            ]
            candidates.append(ChartRecommendation(
                id=f"line-{date_col.name}-{num_col.name}",
                title=f"{num_col.name} Over Time",
                type="line",
                data=series,
                insights=[text for text in insights if text],
                priority=PRIORITY_LINE,
                columns=[date_col.name, num_col.name],
                description=f"Trend analysis of {num_col.name} over {date_col.name}",
            ))
    return candidates


def _find_correlation(profile: DataProfile, col1: str, col2: str) -> Optional[Correlation]:
    return next(
        (
            c for c in profile.correlations
            if (c.col1 == col1 and c.col2 == col2) or (c.col1 == col2 and c.col2 == col1)
        ),
        None,
    )


def _scatter_candidates(profile: DataProfile, rows: Rows, numeric: List[DataColumn]) -> List[ChartRecommendation]:
    candidates = []
    for i, col1 in enumerate(numeric):
        for col2 in numeric[i + 1:]:
            correlation = _find_correlation(profile, col1.name, col2.name)
            if correlation is None or abs(correlation.correlation) <= SCATTER_MIN_CORRELATION:
                continue
            scatter_data = create_scatter_plot(rows, col1.name, col2.name)
            candidates.append(ChartRecommendation(
                id=f"scatter-{col1.name}-{col2.name}",
                title=f"{col1.name} vs {col2.name}",
                type="scatter",
                data=scatter_data,
                insights=[
                    f"Correlation: {correlation.correlation:.3f} ({correlation.strength})",
                    interpret_correlation(correlation),
                    f"{len(scatter_data)} data points plotted",
                    analyze_scatter_pattern(scatter_data),
                ],
                priority=PRIORITY_SCATTER_STRONG if correlation.strength == 'strong' else PRIORITY_SCATTER,
                columns=[col1.name, col2.name],
                description=f"Relationship between {col1.name} and {col2.name}",
            ))
    return candidates


def _heatmap_candidates(rows: Rows, categorical: List[DataColumn], numeric: List[DataColumn]) -> List[ChartRecommendation]:
    candidates = []
    for cat_col in categorical[:CROSS_TAB_MAX_COLUMNS]:
        for num_col in numeric[:CROSS_TAB_MAX_COLUMNS]:
            heatmap_data = create_heatmap(rows, cat_col.name, num_col.name)
            if not heatmap_data:
                continue
            insights = [
                f"Analysis across {cat_col.unique_values} categories",
                analyze_heatmap_pattern(heatmap_data, cat_col.name, num_col.name),
                identify_heatmap_outliers(heatmap_data),
            ]
            candidates.append(ChartRecommendation(
                id=f"heatmap-{cat_col.name}-{num_col.name}",
                title=f"{num_col.name} by {cat_col.name}",
                type="heatmap",
                data=heatmap_data,
                insights=[text for text in insights if text],
                priority=PRIORITY_HEATMAP,
                columns=[cat_col.name, num_col.name],
                description=f"{num_col.name} values segmented by {cat_col.name}",
            ))
    return candidates


def _box_candidates(rows: Rows, categorical: List[DataColumn], numeric: List[DataColumn]) -> List[ChartRecommendation]:
    candidates = []
    for cat_col in categorical[:CROSS_TAB_MAX_COLUMNS]:
        if cat_col.unique_values > BOX_MAX_UNIQUE:
            continue
        for num_col in numeric[:CROSS_TAB_MAX_COLUMNS]:
            box_data = create_box_plot(rows, cat_col.name, num_col.name)
            if not box_data:
                continue
            insights = [
                f"Comparing {cat_col.unique_values} categories",
                analyze_box_plot_variation(box_data),
                identify_box_plot_outliers(box_data),
            ]
            candidates.append(ChartRecommendation(
                id=f"box-{cat_col.name}-{num_col.name}",
                title=f"{num_col.name} Distribution by {cat_col.name}",
                type="box",
                data=box_data,
                insights=[text for text in insights if text],
                priority=PRIORITY_BOX,
                columns=[cat_col.name, num_col.name],
                description=f"Statistical distribution of {num_col.name} across {cat_col.name} categories",
            ))
    return candidates


def generate_candidates(profile: DataProfile, rows: Rows) -> List[ChartRecommendation]:
    """All chart candidates, in generation order."""
    numeric = profile.columns_of_type('numeric')
    categorical = [c for c in profile.columns_of_type('categorical') if c.unique_values <= BAR_MAX_UNIQUE]

    candidates = []
    candidates.extend(_histogram_candidates(profile, rows))
    candidates.extend(_categorical_candidates(profile, categorical))
    candidates.extend(_time_series_candidates(profile, rows, numeric))
    candidates.extend(_scatter_candidates(profile, rows, numeric))
    candidates.extend(_heatmap_candidates(rows, categorical, numeric))
    candidates.extend(_box_candidates(rows, categorical, numeric))
    return candidates


@track_performance("recommend_charts")
def recommend_charts(profile: DataProfile, rows: Rows, limit: int = 8) -> List[ChartRecommendation]:
    """
    Recommend charts for a profiled dataset.

    Args:
        profile: Profile of the dataset
        rows: The raw records the profile was computed from
        limit: Maximum number of recommendations to return

    Returns:
        Up to `limit` recommendations, highest priority first; equal
        priorities keep generation order
    """
    candidates = generate_candidates(profile, rows)
    ranked = sorted(candidates, key=lambda c: c.priority, reverse=True)

    logger.info(f"Generated {len(candidates)} chart candidates, returning {min(limit, len(ranked))}")
    return ranked[:limit]

"""
Dataset profiling.

Turns raw records into a DataProfile: per-column type, cardinality, null
count, samples, stats and distribution, plus correlations and quality.
"""
import logging
from typing import Any, Dict, List, Mapping, Sequence

from autoinsight.core.constants import DISTRIBUTION_MAX_UNIQUE, SAMPLE_VALUES_LIMIT
from autoinsight.core.errors import EmptyDatasetError
from autoinsight.core.performance import track_performance
from autoinsight.core.sanitization import sanitize_for_logging
from autoinsight.core.schemas import DataColumn, DataProfile
from autoinsight.services.quality import analyze_quality
from autoinsight.services.statistics import calculate_correlations, calculate_statistics
from autoinsight.services.type_inference import infer_column_type
from autoinsight.services.values import (
    column_values,
    count_distinct,
    numeric_values,
    value_counts,
)

logger = logging.getLogger(__name__)


def schema_fields(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """The first record's keys define the columns."""
    return [str(name) for name in rows[0].keys()]


def profile_column(rows: Sequence[Mapping[str, Any]], name: str) -> DataColumn:
    values = column_values(rows, name)
    null_count = len(rows) - len(values)
    unique_values = count_distinct(values)
    column_type = infer_column_type(values)

    stats = None
    if column_type == 'numeric':
        stats = calculate_statistics(numeric_values(rows, name))

    distribution = None
    if column_type == 'categorical' and unique_values <= DISTRIBUTION_MAX_UNIQUE:
        distribution = value_counts(values)

    return DataColumn(
        name=name,
        type=column_type,
        unique_values=unique_values,
        null_count=null_count,
        sample_values=values[:SAMPLE_VALUES_LIMIT],
        stats=stats,
        distribution=distribution,
    )


@track_performance("profile_dataset")
def profile_dataset(rows: Sequence[Mapping[str, Any]]) -> DataProfile:
    """
    Profile a dataset of records.

    Args:
        rows: Records mapping field name to scalar value

    Returns:
        The complete DataProfile

    Raises:
        EmptyDatasetError: If there are no rows
    """
    if len(rows) == 0:
        raise EmptyDatasetError("No data to analyze")

    fields = schema_fields(rows)
    columns = [profile_column(rows, name) for name in fields]

    # Numbers per numeric column with stats feed correlations and outliers
    numeric_columns: Dict[str, List[float]] = {
        c.name: numeric_values(rows, c.name)
        for c in columns
        if c.type == 'numeric' and c.stats is not None
    }

    correlations = calculate_correlations(numeric_columns)
    data_quality = analyze_quality(rows, columns, numeric_columns)

    for column in columns:
        logger.debug(
            f"Column {sanitize_for_logging(column.name)}: {column.type}, "
            f"{column.unique_values} unique, {column.null_count} missing"
        )
    logger.info(
        f"Profiled {len(rows)} rows x {len(fields)} columns "
        f"({len(numeric_columns)} numeric, {len(correlations)} correlations)"
    )

    return DataProfile(
        total_rows=len(rows),
        total_columns=len(fields),
        columns=columns,
        data_quality=data_quality,
        correlations=correlations,
    )

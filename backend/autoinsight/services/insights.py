"""
Insight generation.

Rule-based quality, anomaly, distribution and correlation insights derived
from a dataset profile, plus business insights from a narrative
collaborator with a local fallback.
"""
import logging
from typing import Any, Dict, List, Mapping, Sequence

from autoinsight.core.constants import (
    COMPLETENESS_CRITICAL,
    COMPLETENESS_WARNING,
    DUPLICATE_HIGH_SHARE,
    NARRATIVE_SAMPLE_ROWS,
    NARRATIVE_SAMPLE_VALUES,
    OUTLIER_MEDIUM_SHARE,
    SEVERITY_RANK,
    SKEWNESS_THRESHOLD,
)
from autoinsight.core.errors import CollaboratorError
from autoinsight.core.performance import track_performance
from autoinsight.core.schemas import AIInsight, DataProfile
from autoinsight.services.narrative import NarrativeCollaborator, parse_narrative, request_narrative
from autoinsight.services.quality import count_upper_outliers
from autoinsight.services.statistics import calculate_skewness, iqr_bounds
from autoinsight.services.values import numeric_values

logger = logging.getLogger(__name__)

Rows = Sequence[Mapping[str, Any]]


def quality_insights(profile: DataProfile) -> List[AIInsight]:
    insights = []
    total_rows = profile.total_rows
    quality = profile.data_quality

    if quality.completeness < COMPLETENESS_WARNING:
        incomplete_rows = total_rows - int(total_rows * quality.completeness)
        insights.append(AIInsight(
            type='quality',
            title='Data Completeness Issue',
            description=(
                f"Dataset is {quality.completeness * 100:.1f}% complete. "
                f"{incomplete_rows} rows have missing values."
            ),
            severity='high' if quality.completeness < COMPLETENESS_CRITICAL else 'medium',
            actionable=True,
            recommendation='Consider data cleaning or imputation strategies for missing values.',
        ))

    if quality.duplicate_rows > 0:
        insights.append(AIInsight(
            type='quality',
            title='Duplicate Records Found',
            description=(
                f"Found {quality.duplicate_rows} duplicate rows "
                f"({quality.duplicate_rows / total_rows * 100:.1f}% of data)."
            ),
            severity='high' if quality.duplicate_rows > total_rows * DUPLICATE_HIGH_SHARE else 'medium',
            actionable=True,
            recommendation='Review and remove duplicate records to improve data quality.',
        ))

    return insights


def statistical_insights(profile: DataProfile, rows: Rows) -> List[AIInsight]:
    """Upper-tail outliers and moment-based skew for every numeric column with stats."""
    insights = []
    total_rows = profile.total_rows

    for col in profile.columns_of_type('numeric'):
        if col.stats is None:
            continue
        values = numeric_values(rows, col.name)

        # Only values above the upper fence are reported here
        _, threshold = iqr_bounds(col.stats.q1, col.stats.q3)
        outlier_count = count_upper_outliers(values, col.stats)
        if outlier_count > 0:
            insights.append(AIInsight(
                type='anomaly',
                title=f"Outliers in {col.name}",
                description=f"{outlier_count} values exceed the normal range (>{threshold:.2f}).",
                severity='medium' if outlier_count > total_rows * OUTLIER_MEDIUM_SHARE else 'low',
                actionable=True,
                recommendation='Investigate outliers - they may represent errors or important edge cases.',
                data={"column": col.name, "threshold": threshold, "count": outlier_count},
            ))

        skewness = calculate_skewness(values)
        if abs(skewness) > SKEWNESS_THRESHOLD:
            right = skewness > 0
            insights.append(AIInsight(
                type='distribution',
                title=f"{col.name} Distribution Skewed",
                description=(
                    f"{col.name} shows {'right' if right else 'left'} skewness ({skewness:.2f}). "
                    f"Most values are concentrated {'below' if right else 'above'} the mean."
                ),
                severity='low',
                actionable=True,
                recommendation=(
                    'Consider log transformation for right-skewed data.' if right
                    else 'Consider square transformation for left-skewed data.'
                ),
            ))

    return insights


def correlation_insights(profile: DataProfile) -> List[AIInsight]:
    insights = []
    for corr in profile.correlations:
        if corr.strength != 'strong':
            continue
        positive = corr.correlation > 0
        insights.append(AIInsight(
            type='correlation',
            title=f"Strong Relationship: {corr.col1} & {corr.col2}",
            description=(
                f"{corr.col1} and {corr.col2} show a {'positive' if positive else 'negative'} "
                f"correlation of {abs(corr.correlation):.3f}."
            ),
            severity='medium',
            actionable=True,
            recommendation=(
                f"As {corr.col1} increases, {corr.col2} tends to increase. Consider this relationship in your analysis."
                if positive else
                f"As {corr.col1} increases, {corr.col2} tends to decrease. This inverse relationship may be significant."
            ),
            data=corr.model_dump(),
        ))
    return insights


def rule_based_insights(profile: DataProfile, rows: Rows) -> List[AIInsight]:
    """Quality, then anomaly/distribution, then correlation insights."""
    return quality_insights(profile) + statistical_insights(profile, rows) + correlation_insights(profile)


def build_narrative_summary(profile: DataProfile) -> Dict[str, Any]:
    """Structured snapshot of the profile handed to the narrative collaborator."""
    return {
        "total_rows": profile.total_rows,
        "total_columns": profile.total_columns,
        "columns": [
            {
                "name": col.name,
                "type": col.type,
                "unique_values": col.unique_values,
                "null_count": col.null_count,
                "sample_values": list(col.sample_values[:NARRATIVE_SAMPLE_VALUES]),
            }
            for col in profile.columns
        ],
        "correlations": [c.model_dump() for c in profile.correlations if c.strength != 'weak'],
        "data_quality": profile.data_quality.model_dump(),
    }


def fallback_business_insights(profile: DataProfile) -> List[AIInsight]:
    """Generic insights derived from column types when no narrative is available."""
    insights = []
    numeric_count = len(profile.columns_of_type('numeric'))
    categorical_count = len(profile.columns_of_type('categorical'))

    if numeric_count > 0:
        insights.append(AIInsight(
            type='business',
            title='Performance Metrics Available',
            description=(
                f"Dataset contains {numeric_count} quantitative metrics that can be used "
                f"for performance tracking and KPI analysis."
            ),
            severity='low',
            actionable=True,
            recommendation='Set up regular monitoring and alerting for key performance indicators.',
        ))

    if categorical_count > 0:
        insights.append(AIInsight(
            type='business',
            title='Segmentation Opportunities',
            description=(
                f"{categorical_count} categorical dimensions available for "
                f"customer/product segmentation analysis."
            ),
            severity='low',
            actionable=True,
            recommendation='Develop targeted strategies for different segments identified in the data.',
        ))

    return insights


def business_insights(
    profile: DataProfile,
    rows: Rows,
    collaborator: NarrativeCollaborator,
    timeout: float,
    limit: int = 5,
) -> List[AIInsight]:
    """
    Ask the collaborator for business insights, falling back locally on any failure.

    A reply with no parsable numbered lines counts as a failure.
    """
    summary = build_narrative_summary(profile)
    sample_rows = [dict(row) for row in rows[:NARRATIVE_SAMPLE_ROWS]]

    try:
        text = request_narrative(collaborator, summary, sample_rows, timeout)
        insights = parse_narrative(text)
        if not insights:
            raise CollaboratorError("Narrative response contained no parsable insights")
    except CollaboratorError as e:
        logger.warning(f"Failed to generate business insights, using fallback: {e}")
        insights = fallback_business_insights(profile)

    return insights[:limit]


def sort_by_severity(insights: List[AIInsight]) -> List[AIInsight]:
    """High before medium before low; equal severities keep their order."""
    return sorted(insights, key=lambda i: SEVERITY_RANK[i.severity], reverse=True)


@track_performance("generate_insights")
def generate_insights(
    profile: DataProfile,
    rows: Rows,
    collaborator: NarrativeCollaborator,
    timeout: float = 15.0,
    business_limit: int = 5,
) -> List[AIInsight]:
    """
    Generate the full insight list for a profiled dataset.

    Args:
        profile: Profile of the dataset
        rows: The raw records the profile was computed from
        collaborator: Source of business narrative
        timeout: Seconds to wait for the collaborator
        business_limit: Maximum business insights kept

    Returns:
        Insights sorted by descending severity
    """
    insights = rule_based_insights(profile, rows)
    insights.extend(business_insights(profile, rows, collaborator, timeout, business_limit))

    logger.info(f"Generated {len(insights)} insights")
    return sort_by_severity(insights)

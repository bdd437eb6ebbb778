"""
Analysis engine.

Owns one dataset, profiles it lazily once, and derives chart
recommendations and insights from the cached profile on demand.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from autoinsight.core.config import Settings, get_settings
from autoinsight.core.errors import DatasetTooLargeError
from autoinsight.core.schemas import (
    AIInsight,
    AnalysisResult,
    ChartRecommendation,
    DataProfile,
    DatasetSummary,
)
from autoinsight.services.insights import generate_insights
from autoinsight.services.narrative import AINarrativeCollaborator, NarrativeCollaborator
from autoinsight.services.profiler import profile_dataset
from autoinsight.services.recommender import recommend_charts

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Profile, chart recommendations and insights for one in-memory dataset.

    The profile is computed on first use and never changes afterwards, so
    recommendations and insights can be regenerated concurrently.

    Example:
        >>> engine = AnalysisEngine(rows)
        >>> profile = engine.profile()
        >>> charts, insights = engine.refresh()
    """

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]],
        narrative: Optional[NarrativeCollaborator] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        if len(rows) > self.settings.max_dataset_rows:
            raise DatasetTooLargeError(
                f"Dataset has {len(rows)} rows; the limit is {self.settings.max_dataset_rows}"
            )
        self._rows: List[Dict[str, Any]] = [dict(row) for row in rows]
        self.narrative = narrative or AINarrativeCollaborator(self.settings)
        self._profile: Optional[DataProfile] = None
        self._profile_lock = threading.Lock()

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self._rows

    def profile(self) -> DataProfile:
        """Return the cached profile, computing it on first call."""
        if self._profile is None:
            with self._profile_lock:
                if self._profile is None:
                    self._profile = profile_dataset(self._rows)
        return self._profile

    def recommend_charts(self) -> List[ChartRecommendation]:
        return recommend_charts(
            self.profile(),
            self._rows,
            limit=self.settings.max_chart_recommendations,
        )

    def generate_insights(self) -> List[AIInsight]:
        return generate_insights(
            self.profile(),
            self._rows,
            self.narrative,
            timeout=self.settings.narrative_timeout_seconds,
            business_limit=self.settings.max_business_insights,
        )

    def refresh(self) -> Tuple[List[ChartRecommendation], List[AIInsight]]:
        """Regenerate charts and insights side by side from the cached profile."""
        self.profile()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="refresh") as executor:
            charts = executor.submit(self.recommend_charts)
            insights = executor.submit(self.generate_insights)
            return charts.result(), insights.result()

    def summarize(self, insights: Sequence[AIInsight] = ()) -> DatasetSummary:
        """Headline counts for a dashboard: column types, correlations, insight mix."""
        profile = self.profile()
        column_types: Dict[str, int] = {}
        for column in profile.columns:
            column_types[column.type] = column_types.get(column.type, 0) + 1

        business = sum(1 for i in insights if i.type == 'business')
        return DatasetSummary(
            total_rows=profile.total_rows,
            total_columns=profile.total_columns,
            column_types=column_types,
            strong_correlations=sum(1 for c in profile.correlations if c.strength == 'strong'),
            completeness=profile.data_quality.completeness,
            business_insights=business,
            technical_insights=len(insights) - business,
            actionable_insights=sum(1 for i in insights if i.actionable),
        )

    def analyze(self) -> AnalysisResult:
        """Profile, then charts and insights, in one call."""
        profile = self.profile()
        charts, insights = self.refresh()
        logger.info(f"Analysis complete: {len(charts)} charts, {len(insights)} insights")
        return AnalysisResult(
            profile=profile,
            charts=charts,
            insights=insights,
            summary=self.summarize(insights),
        )

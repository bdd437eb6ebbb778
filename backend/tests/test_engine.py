"""
Integration tests for the analysis engine.
"""
import pytest
from autoinsight.core.config import Settings
from autoinsight.core.errors import DatasetTooLargeError, EmptyDatasetError
from autoinsight.core.performance import PerformanceMonitor
from autoinsight.core.schemas import AnalysisResult
from autoinsight.services.engine import AnalysisEngine


@pytest.mark.integration
def test_profile_is_computed_once(sales_rows, static_narrative):
    engine = AnalysisEngine(sales_rows, narrative=static_narrative)

    first = engine.profile()
    second = engine.profile()

    assert first is second
    assert PerformanceMonitor.get_stats("profile_dataset")["count"] == 1


@pytest.mark.integration
def test_engine_copies_input_rows(sales_rows, static_narrative):
    engine = AnalysisEngine(sales_rows, narrative=static_narrative)
    sales_rows.clear()

    assert engine.profile().total_rows == 20


@pytest.mark.integration
def test_analyze(sales_rows, static_narrative):
    result = AnalysisEngine(sales_rows, narrative=static_narrative).analyze()

    assert isinstance(result, AnalysisResult)
    assert len(result.charts) == 8
    assert result.summary.total_rows == 20
    assert result.summary.total_columns == 6
    assert result.summary.column_types == {
        "datetime": 1, "categorical": 1, "numeric": 2, "boolean": 1, "text": 1,
    }
    assert result.summary.strong_correlations == 1
    assert result.summary.business_insights == 3
    assert result.summary.technical_insights == len(result.insights) - 3
    assert result.summary.actionable_insights == sum(1 for i in result.insights if i.actionable)


@pytest.mark.integration
def test_refresh_reuses_profile(sales_rows, static_narrative):
    engine = AnalysisEngine(sales_rows, narrative=static_narrative)
    result = engine.analyze()

    charts, insights = engine.refresh()

    assert [c.id for c in charts] == [c.id for c in result.charts]
    assert [i.title for i in insights] == [i.title for i in result.insights]
    assert PerformanceMonitor.get_stats("profile_dataset")["count"] == 1
    assert PerformanceMonitor.get_stats("recommend_charts")["count"] == 2


@pytest.mark.integration
def test_failing_narrative_still_analyzes(sales_rows, failing_narrative):
    result = AnalysisEngine(sales_rows, narrative=failing_narrative).analyze()

    business = [i for i in result.insights if i.type == 'business']
    assert 0 < len(business) <= 2
    assert result.summary.business_insights == len(business)


@pytest.mark.integration
def test_chart_limit_from_settings(sales_rows, static_narrative):
    settings = Settings(max_chart_recommendations=3, max_business_insights=1)
    engine = AnalysisEngine(sales_rows, narrative=static_narrative, settings=settings)

    assert len(engine.recommend_charts()) == 3
    assert len([i for i in engine.generate_insights() if i.type == 'business']) == 1


@pytest.mark.integration
def test_too_many_rows(static_narrative):
    settings = Settings(max_dataset_rows=5)
    with pytest.raises(DatasetTooLargeError):
        AnalysisEngine([{"v": i} for i in range(6)], narrative=static_narrative, settings=settings)


@pytest.mark.integration
def test_empty_dataset(static_narrative):
    engine = AnalysisEngine([], narrative=static_narrative)
    with pytest.raises(EmptyDatasetError):
        engine.analyze()

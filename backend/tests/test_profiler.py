"""
Unit tests for the profiler service.
"""
import pytest
from autoinsight.core.errors import EmptyDatasetError
from autoinsight.core.performance import PerformanceMonitor
from autoinsight.core.schemas import DataProfile
from autoinsight.services.profiler import profile_dataset


@pytest.mark.unit
def test_profile_dataset_basic(sales_rows):
    profile = profile_dataset(sales_rows)

    assert isinstance(profile, DataProfile)
    assert profile.total_rows == 20
    assert profile.total_columns == 6
    assert [c.name for c in profile.columns] == ["date", "region", "units", "revenue", "returned", "note"]


@pytest.mark.unit
def test_profile_dataset_column_types(sales_rows):
    profile = profile_dataset(sales_rows)

    types = {c.name: c.type for c in profile.columns}
    assert types == {
        "date": "datetime",
        "region": "categorical",
        "units": "numeric",
        "revenue": "numeric",
        "returned": "boolean",
        "note": "text",
    }


@pytest.mark.unit
def test_profile_numeric_column_stats(sales_rows):
    units = profile_dataset(sales_rows).column("units")

    assert units.stats is not None
    assert units.stats.min == 1
    assert units.stats.max == 20
    assert units.stats.mean == 10.5
    assert units.distribution is None


@pytest.mark.unit
def test_profile_categorical_distribution(sales_rows):
    region = profile_dataset(sales_rows).column("region")

    assert region.unique_values == 4
    assert region.distribution == {"North": 5, "South": 5, "East": 5, "West": 5}
    assert region.stats is None


@pytest.mark.unit
def test_sample_values_are_first_ten_non_null():
    rows = [{"v": None if i % 2 else i} for i in range(30)]
    column = profile_dataset(rows).column("v")

    assert column.null_count == 15
    assert column.sample_values == (0, 2, 4, 6, 8, 10, 12, 14, 16, 18)


@pytest.mark.unit
def test_outlier_is_flagged():
    rows = [{"value": v} for v in [1, 2, 3, 4, 5, 6, 7, 8, 9, 1000]]
    profile = profile_dataset(rows)

    assert profile.column("value").type == 'numeric'
    assert profile.data_quality.outliers >= 1


@pytest.mark.unit
def test_constant_string_column():
    profile = profile_dataset([{"label": "A"} for _ in range(10)])
    label = profile.column("label")

    assert label.type == 'categorical'
    assert label.unique_values == 1
    assert label.distribution == {"A": 10}


@pytest.mark.unit
def test_duplicate_rows_counted():
    rows = [{"id": 1, "name": "same"}] * 5 + [{"id": i, "name": f"row {i}"} for i in range(2, 7)]
    profile = profile_dataset(rows)

    assert profile.total_rows == 10
    assert profile.data_quality.duplicate_rows == 4


@pytest.mark.unit
def test_missing_fields_count_as_nulls():
    rows = [{"a": 1, "b": "x"}, {"a": 2}, {"a": 3, "b": ""}]
    profile = profile_dataset(rows)

    assert profile.column("b").null_count == 2
    assert profile.data_quality.completeness == pytest.approx(4 / 6)


@pytest.mark.unit
def test_columns_come_from_first_record():
    rows = [{"a": 1}, {"a": 2, "extra": "ignored"}]
    profile = profile_dataset(rows)

    assert profile.total_columns == 1
    assert profile.column("extra") is None


@pytest.mark.unit
def test_profile_invariants(sales_rows):
    profile = profile_dataset(sales_rows)

    assert 0 <= profile.data_quality.completeness <= 1
    for column in profile.columns:
        assert column.null_count <= profile.total_rows
        assert len(column.sample_values) <= 10
        if column.stats is not None:
            s = column.stats
            assert s.min <= s.q1 <= s.median <= s.q3 <= s.max
            assert s.std >= 0
    for corr in profile.correlations:
        assert -1 <= corr.correlation <= 1


@pytest.mark.unit
def test_strong_correlation_detected(sales_rows):
    profile = profile_dataset(sales_rows)

    assert len(profile.correlations) == 1
    corr = profile.correlations[0]
    assert (corr.col1, corr.col2) == ("units", "revenue")
    assert corr.strength == 'strong'


@pytest.mark.unit
def test_profile_is_immutable(sales_rows):
    profile = profile_dataset(sales_rows)
    with pytest.raises(Exception):
        profile.total_rows = 0


@pytest.mark.unit
def test_empty_dataset_raises():
    with pytest.raises(EmptyDatasetError, match="No data to analyze"):
        profile_dataset([])


@pytest.mark.unit
def test_profiling_is_timed(sales_rows):
    profile_dataset(sales_rows)
    stats = PerformanceMonitor.get_stats("profile_dataset")
    assert stats is not None
    assert stats["count"] == 1


@pytest.mark.unit
def test_list_cells_stay_in_their_own_column():
    rows = [{"tags": [i, i + 1], "v": i * 2} for i in range(10)]
    profile = profile_dataset(rows)

    tags = profile.column("tags")
    assert tags.type == 'text'
    assert tags.stats is None
    assert tags.null_count == 0

    v = profile.column("v")
    assert v.type == 'numeric'
    assert v.stats.max == 18


@pytest.mark.unit
def test_correlations_do_not_depend_on_column_order():
    a = [1, 4, 2, 8, 5, 7, 3]
    b = [3, 1, 4, 1, 5, 9, 2]
    forward = profile_dataset([{"a": x, "b": y} for x, y in zip(a, b)])
    backward = profile_dataset([{"b": y, "a": x} for x, y in zip(a, b)])

    assert (forward.correlations[0].col1, forward.correlations[0].col2) == ("a", "b")
    assert (backward.correlations[0].col1, backward.correlations[0].col2) == ("b", "a")
    assert forward.correlations[0].correlation == backward.correlations[0].correlation
    assert forward.correlations[0].strength == backward.correlations[0].strength

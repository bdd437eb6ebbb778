"""
Unit tests for descriptive statistics and correlation.
"""
import pytest
from autoinsight.services.statistics import (
    calculate_correlations,
    calculate_skewness,
    calculate_statistics,
    correlation_strength,
    iqr_bounds,
    pearson_correlation,
)


@pytest.mark.unit
def test_basic_statistics():
    stats = calculate_statistics([1, 2, 3, 4, 5, 6, 7, 8, 9, 1000])

    assert stats.min == 1
    assert stats.max == 1000
    assert stats.mean == pytest.approx(104.5)
    assert stats.median == 5.5
    # nearest rank at floor(n * 0.25) and floor(n * 0.75)
    assert stats.q1 == 3
    assert stats.q3 == 8


@pytest.mark.unit
def test_std_is_population_std():
    stats = calculate_statistics([2, 4, 4, 4, 5, 5, 7, 9])
    assert stats.std == pytest.approx(2.0)


@pytest.mark.unit
def test_single_value_statistics():
    stats = calculate_statistics([42])
    assert stats.min == stats.max == stats.median == stats.q1 == stats.q3 == 42
    assert stats.std == 0


@pytest.mark.unit
def test_empty_statistics():
    assert calculate_statistics([]) is None


@pytest.mark.unit
def test_iqr_bounds():
    assert iqr_bounds(3, 8) == (-4.5, 15.5)


@pytest.mark.unit
def test_skewness():
    assert calculate_skewness([1, 2, 3, 4, 5]) == pytest.approx(0.0)
    assert calculate_skewness([1, 1, 1, 1, 10]) > 1
    assert calculate_skewness([5, 5, 5]) == 0.0
    assert calculate_skewness([]) == 0.0


@pytest.mark.unit
def test_perfect_correlation():
    assert pearson_correlation([1, 2, 3, 4, 5], [2, 4, 6, 8, 10]) == 1.0
    assert pearson_correlation([1, 2, 3, 4, 5], [10, 8, 6, 4, 2]) == -1.0


@pytest.mark.unit
def test_correlation_degenerate_inputs():
    assert pearson_correlation([1], [2]) == 0.0
    assert pearson_correlation([3, 3, 3], [1, 2, 3]) == 0.0


@pytest.mark.unit
def test_correlation_pairs_by_position_over_shorter_column():
    # the trailing 100 has no partner and is ignored
    assert pearson_correlation([1, 2, 3, 100], [1, 2, 3]) == pytest.approx(1.0)


@pytest.mark.unit
def test_correlation_strength_bands():
    assert correlation_strength(0.71) == 'strong'
    assert correlation_strength(-0.9) == 'strong'
    assert correlation_strength(0.7) == 'moderate'
    assert correlation_strength(0.31) == 'moderate'
    assert correlation_strength(0.3) == 'weak'
    assert correlation_strength(0.0) == 'weak'


@pytest.mark.unit
def test_calculate_correlations_covers_each_pair_once():
    correlations = calculate_correlations({
        "a": [1, 2, 3, 4],
        "b": [2, 4, 6, 8],
        "c": [4, 3, 2, 1],
        "d": [7],
    })

    pairs = [(c.col1, c.col2) for c in correlations]
    assert pairs == [("a", "b"), ("a", "c"), ("b", "c")]
    for corr in correlations:
        assert -1 <= corr.correlation <= 1
        assert corr.strength == 'strong'


@pytest.mark.unit
def test_correlation_is_symmetric():
    a = [1.5, 4, 2, 8, 5, 7, 3]
    b = [3, 1, 4, 1, 5, 9, 2.5]
    assert pearson_correlation(a, b) == pearson_correlation(b, a)
    assert 0 < abs(pearson_correlation(a, b)) < 1

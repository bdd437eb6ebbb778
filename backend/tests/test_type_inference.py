"""
Unit tests for column type inference.
"""
import pytest
from datetime import date
from autoinsight.services.type_inference import infer_column_type, is_boolean_like


@pytest.mark.unit
def test_boolean_columns():
    assert infer_column_type([True, False, True]) == 'boolean'
    assert infer_column_type(["true", "false", "true", "false"]) == 'boolean'
    assert infer_column_type([0, 1, 1, 0, 1]) == 'boolean'


@pytest.mark.unit
def test_boolean_strings_are_case_sensitive():
    assert is_boolean_like("true")
    assert not is_boolean_like("True")
    assert not is_boolean_like(2)


@pytest.mark.unit
def test_numeric_columns():
    assert infer_column_type([1, 2, 3, 4, 5]) == 'numeric'
    assert infer_column_type(["1.5", "2.5", "3", "4", "x"]) == 'numeric'


@pytest.mark.unit
def test_threshold_is_inclusive():
    # exactly 80% numeric
    assert infer_column_type([10, 20, 30, 40, "other"]) == 'numeric'
    # 75% numeric is not enough, falls through to cardinality rule
    assert infer_column_type([10, 20, 30, "other"]) == 'text'


@pytest.mark.unit
def test_datetime_columns():
    assert infer_column_type(["2024-01-01", "2024-02-01", "2024-03-01"]) == 'datetime'
    assert infer_column_type([date(2024, 1, 1), date(2024, 1, 2)]) == 'datetime'


@pytest.mark.unit
def test_categorical_columns():
    values = ["A", "B", "A", "B", "C", "A", "B", "C", "A", "A"]
    assert infer_column_type(values) == 'categorical'


@pytest.mark.unit
def test_single_repeated_value_is_categorical():
    assert infer_column_type(["A"] * 10) == 'categorical'


@pytest.mark.unit
def test_high_cardinality_strings_are_text():
    assert infer_column_type([f"name {chr(65 + i)}" for i in range(20)]) == 'text'


@pytest.mark.unit
def test_empty_column_is_text():
    assert infer_column_type([]) == 'text'

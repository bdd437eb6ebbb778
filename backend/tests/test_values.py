"""
Unit tests for cell value classification and conversion.
"""
import pytest
from datetime import date, datetime
from autoinsight.services.values import (
    ValueKind,
    classify_value,
    count_distinct,
    is_missing,
    numeric_values,
    row_key,
    to_datetime,
    to_display_str,
    to_number,
    value_counts,
)


@pytest.mark.unit
def test_missing_values():
    assert is_missing(None)
    assert is_missing(float("nan"))
    assert is_missing("")
    assert is_missing("   ")
    assert not is_missing(0)
    assert not is_missing(False)
    assert not is_missing("0")


@pytest.mark.unit
def test_classify_value_checks_bool_before_number():
    assert classify_value(True) is ValueKind.BOOLEAN
    assert classify_value(1) is ValueKind.NUMBER
    assert classify_value(2.5) is ValueKind.NUMBER
    assert classify_value("abc") is ValueKind.STRING
    assert classify_value(date(2024, 1, 1)) is ValueKind.DATE
    assert classify_value(None) is ValueKind.NULL


@pytest.mark.unit
def test_to_number():
    assert to_number(3) == 3.0
    assert to_number(" 4.5 ") == 4.5
    assert to_number("1e3") == 1000.0
    assert to_number(True) == 1.0
    assert to_number("abc") is None
    assert to_number("1_000") is None
    assert to_number("inf") is None
    assert to_number(float("inf")) is None
    assert to_number(None) is None


@pytest.mark.unit
def test_to_datetime():
    parsed = to_datetime("2024-03-15")
    assert parsed is not None
    assert (parsed.year, parsed.month, parsed.day) == (2024, 3, 15)
    assert to_datetime(datetime(2024, 1, 1, 12, 30)).hour == 12
    assert to_datetime("hello") is None
    assert to_datetime(42) is None


@pytest.mark.unit
def test_to_datetime_drops_timezone():
    parsed = to_datetime("2024-03-15T10:00:00+02:00")
    assert parsed.tzinfo is None
    assert parsed.hour == 8


@pytest.mark.unit
def test_display_strings():
    assert to_display_str(True) == "true"
    assert to_display_str(False) == "false"
    assert to_display_str(5.0) == "5"
    assert to_display_str(2.5) == "2.5"
    assert to_display_str(date(2024, 1, 2)) == "2024-01-02"
    assert to_display_str("x") == "x"


@pytest.mark.unit
def test_distinct_counting_separates_booleans_from_numbers():
    assert count_distinct([1, 1.0, 2]) == 2
    assert count_distinct([True, 1]) == 2
    assert count_distinct(["a", "a", "b"]) == 2


@pytest.mark.unit
def test_row_key_ignores_key_order():
    assert row_key({"a": 1, "b": "x"}) == row_key({"b": "x", "a": 1})
    assert row_key({"a": 1}) != row_key({"a": True})


@pytest.mark.unit
def test_numeric_values_skip_non_numbers():
    rows = [{"v": 1}, {"v": None}, {"v": "2.5"}, {"v": "n/a"}, {}]
    assert numeric_values(rows, "v") == [1.0, 2.5]


@pytest.mark.unit
def test_value_counts_keep_first_seen_order():
    counts = value_counts(["b", "a", "b", 1, 1.0])
    assert list(counts) == ["b", "a", "1"]
    assert counts == {"b": 2, "a": 1, "1": 2}


@pytest.mark.unit
def test_container_cells_are_neither_dates_nor_numbers():
    assert to_datetime([1, 2]) is None
    assert to_datetime(["2024-01-01"]) is None
    assert to_datetime({"day": "2024-01-01"}) is None
    assert to_number([5]) is None
    assert count_distinct([[1, 2], [1, 2], [3]]) == 2

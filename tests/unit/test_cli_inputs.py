"""Unit tests for CLI selector parsing."""
from datetime import datetime, timezone

import pytest

from market_analysis.analytics.aggregator import FieldSelection, FunctionSelection
from market_analysis.analytics.periods import WEEKLY
from market_analysis.cli.inputs import (
    parse_date_input,
    parse_date_range,
    parse_field_selection,
    parse_function,
    parse_period_selector,
    parse_symbol,
)
from market_analysis.core.enums import AggregationFunction
from market_analysis.core.exceptions import InputError


# ============================================================================
# Fields
# ============================================================================

@pytest.mark.parametrize("value,expected", [
    ("close", FieldSelection("close")),
    ("Close", FieldSelection("close")),
    ("high_price", FieldSelection("high")),
    ("Adj Close", FieldSelection("adj_close")),
    ("close_delta_pct", FieldSelection("close_delta_pct")),
    ("high_prevclose_delta", FieldSelection("high_prevclose_delta")),
    ("open|close", FieldSelection("open", "close")),
    ("open_price|close_price", FieldSelection("open", "close")),
])
def test_parse_field_selection(value, expected):
    assert parse_field_selection(value) == expected


@pytest.mark.parametrize("value", ["", "  ", "bid", "open|close|high", "open|close_delta", "open|"])
def test_parse_field_selection_invalid(value):
    with pytest.raises(InputError):
        parse_field_selection(value)


def test_field_selection_properties():
    pair = parse_field_selection("open|close")
    assert pair.is_pair
    assert str(pair) == "open|close"

    derived = parse_field_selection("volume_delta")
    assert derived.is_derived
    assert not derived.is_pair


# ============================================================================
# Functions
# ============================================================================

@pytest.mark.parametrize("value,expected", [
    ("max", FunctionSelection(AggregationFunction.MAX)),
    ("MAX", FunctionSelection(AggregationFunction.MAX)),
    ("avg", FunctionSelection(AggregationFunction.AVG)),
    ("average", FunctionSelection(AggregationFunction.AVG)),
    ("median", FunctionSelection(AggregationFunction.MEDIAN)),
    ("spread", FunctionSelection(AggregationFunction.SPREAD)),
    ("p90", FunctionSelection(AggregationFunction.PERCENTILE, 90.0)),
    ("p12.5", FunctionSelection(AggregationFunction.PERCENTILE, 12.5)),
])
def test_parse_function(value, expected):
    assert parse_function(value) == expected


@pytest.mark.parametrize("value", ["", "mode", "p", "p150", "percentile", "p-5"])
def test_parse_function_invalid(value):
    with pytest.raises(InputError):
        parse_function(value)


def test_function_selection_str():
    assert str(parse_function("p90")) == "p90"
    assert str(parse_function("max")) == "max"


# ============================================================================
# Symbol, period and dates
# ============================================================================

def test_parse_symbol():
    assert parse_symbol(" aapl ") == "AAPL"
    assert parse_symbol("brk.b") == "BRK.B"
    with pytest.raises(InputError):
        parse_symbol("")
    with pytest.raises(InputError):
        parse_symbol("not a ticker")


def test_parse_period_selector():
    assert parse_period_selector("weekly") == WEEKLY
    with pytest.raises(InputError):
        parse_period_selector("monthly")


def test_parse_date_input():
    assert parse_date_input("2022-02-01") == datetime(2022, 2, 1, tzinfo=timezone.utc)
    with pytest.raises(InputError):
        parse_date_input("2022-13-01")


def test_parse_date_range():
    start, end = parse_date_range("2022-01-01", "2022-02-01")
    assert start < end
    assert parse_date_range(None, None) == (None, None)

    with pytest.raises(InputError, match="after"):
        parse_date_range("2022-02-01", "2022-01-01")

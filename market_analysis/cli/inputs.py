"""
Selector parsing for the CLI

Every parser is a pure function: it returns the parsed value or raises
InputError. Re-prompting on failure is the caller's business.
"""
import re
from datetime import datetime
from typing import Optional

from market_analysis.analytics.aggregator import DERIVED_FIELDS, FieldSelection, FunctionSelection
from market_analysis.analytics.periods import Period, parse_period
from market_analysis.core.enums import AggregationFunction, PriceField
from market_analysis.core.exceptions import InputError
from market_analysis.data.csv_loader import parse_date


RAW_FIELDS = [f.value for f in PriceField]

# Accepted spellings -> canonical field name
_FIELD_ALIASES = {
    "open_price": "open",
    "high_price": "high",
    "low_price": "low",
    "close_price": "close",
    "adj_close_price": "adj_close",
    "adjclose": "adj_close",
}

_FUNCTION_ALIASES = {
    "average": AggregationFunction.AVG,
    "mean": AggregationFunction.AVG,
    "total": AggregationFunction.SUM,
}


def parse_symbol(value: str) -> str:
    symbol = (value or "").strip().upper()
    if not re.match(r'^[A-Z0-9.\-^=]{1,15}$', symbol):
        raise InputError(f"Invalid ticker symbol: '{value}'")
    return symbol


def _parse_field_name(value: str) -> str:
    name = value.strip().lower().replace(" ", "_")
    return _FIELD_ALIASES.get(name, name)


def parse_field_selection(value: str) -> FieldSelection:
    """Parse ``close``, ``close_delta_pct`` or a pair such as ``open|close``."""
    if not value or not value.strip():
        raise InputError("Price field cannot be empty")

    parts = value.split("|")
    if len(parts) > 2:
        raise InputError(f"At most two fields can be joined by '|', got '{value}'")

    names = [_parse_field_name(p) for p in parts]
    if len(names) == 2:
        for name in names:
            if name not in RAW_FIELDS:
                raise InputError(
                    f"Invalid price field '{name}' in pair. Choose from: {', '.join(RAW_FIELDS)}"
                )
        return FieldSelection(names[0], names[1])

    name = names[0]
    if name not in RAW_FIELDS and name not in DERIVED_FIELDS:
        raise InputError(
            f"Invalid price field '{value}'. Choose from: {', '.join(RAW_FIELDS)} "
            f"or a delta field such as 'close_delta_pct'"
        )
    return FieldSelection(name)


def parse_function(value: str) -> FunctionSelection:
    """Parse ``max``, ``avg``, ``median``, ``spread`` or a percentile ``p90``."""
    if not value or not value.strip():
        raise InputError("Aggregation function cannot be empty")

    name = value.strip().lower()
    match = re.match(r'^p(\d+(?:\.\d+)?)$', name)
    if match:
        p = float(match.group(1))
        if p > 100:
            raise InputError(f"Percentile must be between 0 and 100, got {p:g}")
        return FunctionSelection(AggregationFunction.PERCENTILE, p)

    if name in _FUNCTION_ALIASES:
        return FunctionSelection(_FUNCTION_ALIASES[name])

    try:
        function = AggregationFunction(name)
    except ValueError:
        raise InputError(
            f"Invalid aggregation function '{value}'. "
            f"Choose from: max, min, avg, sum, median, spread or pNN (e.g. p90)"
        ) from None

    if function == AggregationFunction.PERCENTILE:
        raise InputError("Give the percentile as pNN, e.g. 'p90'")
    return FunctionSelection(function)


def parse_period_selector(value: str) -> Period:
    return parse_period(value)


def parse_date_input(value: str) -> datetime:
    """Parse a ``YYYY-MM-DD`` date."""
    try:
        return parse_date(value or "")
    except ValueError:
        raise InputError(f"Invalid date '{value}'. Expected format: YYYY-MM-DD") from None


def parse_date_range(start: Optional[str], end: Optional[str]):
    """Parse optional start/end dates and check their order."""
    start_dt = parse_date_input(start) if start else None
    end_dt = parse_date_input(end) if end else None
    if start_dt and end_dt and start_dt > end_dt:
        raise InputError(f"Start date {start} is after end date {end}")
    return start_dt, end_dt

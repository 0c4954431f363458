"""Price Deltas

Point-to-point and trailing differences over flat value sequences. The
output is aligned with the input and can itself be bucketed.

Index 0 of every trailing or lagged delta is the NaN missing-value
sentinel, since no predecessor exists. A zero base in a percentage delta
also yields NaN.
"""
from typing import List, Sequence, Union

from market_analysis.analytics.numeric import MISSING, infer_kind, is_missing
from market_analysis.core.exceptions import InconsistentLengthError


Number = Union[int, float]


def _as_floats(values: Sequence[Number]) -> List[float]:
    kind = infer_kind(values)
    return [kind.to_float(v) for v in values]


def _percentage(delta: float, base: float) -> float:
    if base == 0 or is_missing(base) or is_missing(delta):
        return MISSING
    return delta / base * 100.0


def _check_lengths(first: Sequence, second: Sequence) -> None:
    if len(first) != len(second):
        raise InconsistentLengthError(
            len(first), len(second), "Paired series", first_name="first", second_name="second"
        )


def trailing_delta(values: Sequence[Number]) -> List[float]:
    """``r[i] = v[i] - v[i-1]``, NaN at index 0.

    >>> trailing_delta([10, 12, 9])
    [nan, 2.0, -3.0]
    """
    v = _as_floats(values)
    if not v:
        return []
    return [MISSING] + [v[i] - v[i - 1] for i in range(1, len(v))]


def trailing_percentage_delta(values: Sequence[Number]) -> List[float]:
    """``r[i] = (v[i] - v[i-1]) / v[i-1] * 100``, NaN at index 0."""
    v = _as_floats(values)
    if not v:
        return []
    return [MISSING] + [_percentage(v[i] - v[i - 1], v[i - 1]) for i in range(1, len(v))]


def paired_delta(first: Sequence[Number], second: Sequence[Number]) -> List[float]:
    """``r[i] = A[i] - B[i]`` for two aligned series."""
    _check_lengths(first, second)
    a, b = _as_floats(first), _as_floats(second)
    return [x - y for x, y in zip(a, b)]


def paired_percentage_delta(first: Sequence[Number], second: Sequence[Number]) -> List[float]:
    """``r[i] = (A[i] - B[i]) / B[i] * 100`` for two aligned series."""
    _check_lengths(first, second)
    a, b = _as_floats(first), _as_floats(second)
    return [_percentage(x - y, y) for x, y in zip(a, b)]


def lagged_delta(current: Sequence[Number], previous: Sequence[Number]) -> List[float]:
    """``r[i] = A[i] - B[i-1]``, NaN at index 0.

    E.g. today's high against yesterday's close.
    """
    _check_lengths(current, previous)
    a, b = _as_floats(current), _as_floats(previous)
    if not a:
        return []
    return [MISSING] + [a[i] - b[i - 1] for i in range(1, len(a))]


def lagged_percentage_delta(current: Sequence[Number], previous: Sequence[Number]) -> List[float]:
    """``r[i] = (A[i] - B[i-1]) / B[i-1] * 100``, NaN at index 0."""
    _check_lengths(current, previous)
    a, b = _as_floats(current), _as_floats(previous)
    if not a:
        return []
    return [MISSING] + [_percentage(a[i] - b[i - 1], b[i - 1]) for i in range(1, len(a))]


# =============================================================================
# Previous-close deltas
# =============================================================================

def high_prevclose_delta(high: Sequence[Number], close: Sequence[Number]) -> List[float]:
    """How far each day's high rose above the previous close."""
    return lagged_delta(high, close)


def prevclose_low_delta(low: Sequence[Number], close: Sequence[Number]) -> List[float]:
    """How far each day's low fell below the previous close (``close[i-1] - low[i]``)."""
    return [-d for d in lagged_delta(low, close)]


def high_prevclose_percentage_delta(high: Sequence[Number], close: Sequence[Number]) -> List[float]:
    return lagged_percentage_delta(high, close)


def prevclose_low_percentage_delta(low: Sequence[Number], close: Sequence[Number]) -> List[float]:
    return [-d for d in lagged_percentage_delta(low, close)]


# =============================================================================
# Intraday range deltas
# =============================================================================

def high_open_delta(high: Sequence[Number], open_: Sequence[Number]) -> List[float]:
    """How far each day's high rose above its open."""
    return paired_delta(high, open_)


def open_low_delta(open_: Sequence[Number], low: Sequence[Number]) -> List[float]:
    """How far each day's low fell below its open (``open[i] - low[i]``)."""
    return paired_delta(open_, low)


def high_open_percentage_delta(high: Sequence[Number], open_: Sequence[Number]) -> List[float]:
    return paired_percentage_delta(high, open_)


def open_low_percentage_delta(open_: Sequence[Number], low: Sequence[Number]) -> List[float]:
    """``(open[i] - low[i]) / open[i] * 100``."""
    return [-d for d in paired_percentage_delta(low, open_)]

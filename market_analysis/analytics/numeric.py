"""Numeric Kinds

Closed set of numeric variants the reducers operate on, with the
capabilities every reducer needs: a zero value, widening to float and a
NaN-aware ordering.
"""
import math
from enum import Enum
from numbers import Real
from typing import Iterable, Sequence, Tuple, Union

from market_analysis.core.exceptions import NumericConversionError


Number = Union[int, float]

MISSING = float("nan")

_INT32_MIN, _INT32_MAX = -(2 ** 31), 2 ** 31 - 1
_INT64_MIN, _INT64_MAX = -(2 ** 63), 2 ** 63 - 1


class NumericKind(Enum):
    """Supported numeric variants."""
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def is_integer(self) -> bool:
        return self in (NumericKind.INT32, NumericKind.INT64)

    def zero(self) -> Number:
        """Additive identity of this kind."""
        return 0 if self.is_integer else 0.0

    def to_float(self, value: Number) -> float:
        """Widen one value of this kind to a Python float.

        Raises:
            NumericConversionError: If the value does not belong to this kind
        """
        if isinstance(value, bool) or not isinstance(value, Real):
            raise NumericConversionError(
                f"Cannot widen {value!r} ({type(value).__name__}) as {self.value}"
            )

        if self.is_integer:
            if not isinstance(value, int):
                raise NumericConversionError(f"Float {value!r} is not a valid {self.value}")
            low, high = (_INT32_MIN, _INT32_MAX) if self == NumericKind.INT32 else (_INT64_MIN, _INT64_MAX)
            if not low <= value <= high:
                raise NumericConversionError(f"{value} is out of range for {self.value}")

        return float(value)


def infer_kind(values: Iterable[Number]) -> NumericKind:
    """Pick the narrowest kind that holds every value.

    Integers that fit in 32 bits are INT32, other integers INT64, and any
    float makes the whole sequence FLOAT64.

    Raises:
        NumericConversionError: If a value is not a real number
    """
    kind = NumericKind.INT32
    for value in values:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise NumericConversionError(
                f"Unsupported value {value!r} ({type(value).__name__})"
            )
        if not isinstance(value, int):
            return NumericKind.FLOAT64
        if not _INT32_MIN <= value <= _INT32_MAX:
            kind = NumericKind.INT64
    return kind


def widen(values: Sequence[Number], kind: NumericKind = None) -> list:
    """Convert a sequence to floats through its numeric kind."""
    if kind is None:
        kind = infer_kind(values)
    return [kind.to_float(v) for v in values]


def is_missing(value: Number) -> bool:
    """True for the NaN missing-value sentinel."""
    return isinstance(value, float) and math.isnan(value)


def missing_first_key(value: Number) -> Tuple[int, Number]:
    """Sort key that places NaN below every other value."""
    if is_missing(value):
        return (0, 0)
    return (1, value)


def nan_max(values: Sequence[Number]) -> Number:
    """Maximum where NaN loses every comparison.

    Returns NaN only when every value is NaN.
    """
    return max(values, key=missing_first_key)


def nan_min(values: Sequence[Number]) -> Number:
    """Minimum ignoring NaN unless every value is NaN."""
    present = [v for v in values if not is_missing(v)]
    if not present:
        return values[0]
    return min(present)

"""Per-Bucket Reducers

Scalar summaries of each bucket of a ``BucketedSeries``. Every series-level
reducer returns an ``AggregationResult``: bucket start timestamp -> value,
in bucket order.
"""
from datetime import datetime
from typing import Callable, Dict, List, Sequence, Tuple, Union

from market_analysis.analytics.bucketing import Bucket, BucketedSeries
from market_analysis.analytics.numeric import (
    MISSING,
    infer_kind,
    is_missing,
    nan_max,
    nan_min,
    widen,
)
from market_analysis.analytics.order_statistics import percentile
from market_analysis.core.enums import InterpolationMethod, PivotStrategy
from market_analysis.core.exceptions import EmptyBucketError, InconsistentLengthError
from market_analysis.logger import logger


Number = Union[int, float]
AggregationResult = Dict[datetime, Number]


# =============================================================================
# Single-bucket reductions
# =============================================================================

def bucket_max(values: Sequence[Number]) -> Number:
    """Maximum with NaN ranked below every value; all-NaN gives NaN."""
    if not values:
        raise EmptyBucketError("Cannot take the maximum of an empty bucket")
    return nan_max(values)


def bucket_min(values: Sequence[Number]) -> Number:
    """Minimum ignoring NaN; all-NaN gives NaN."""
    if not values:
        raise EmptyBucketError("Cannot take the minimum of an empty bucket")
    return nan_min(values)


def bucket_average(values: Sequence[Number]) -> float:
    """Arithmetic mean after widening every value to float."""
    if not values:
        raise EmptyBucketError("Cannot average an empty bucket")
    kind = infer_kind(values)
    total = sum(widen(values, kind), kind.to_float(kind.zero()))
    return total / len(values)


def bucket_sum(values: Sequence[Number]) -> float:
    """Sum after widening to float; an empty bucket sums to 0.0."""
    if not values:
        return 0.0
    kind = infer_kind(values)
    return sum(widen(values, kind), kind.to_float(kind.zero()))


def bucket_spread(pairs: Sequence[Tuple[Number, Number]]) -> float:
    """Ending record's second field minus starting record's first field.

    The starting record has the smallest first field (earliest on ties) and
    the ending record the largest first field (latest on ties). This is a
    min/max-by-key selection, not chronological first/last.
    """
    if not pairs:
        raise EmptyBucketError("Cannot compute a spread over an empty bucket")

    starting = pairs[0]
    ending = pairs[0]
    for pair in pairs[1:]:
        if pair[0] < starting[0]:
            starting = pair
        if pair[0] >= ending[0]:
            ending = pair

    kind = infer_kind([starting[0], ending[1]])
    return kind.to_float(ending[1]) - kind.to_float(starting[0])


def bucket_percentile(
    values: Sequence[Number],
    p: float,
    method: Union[str, InterpolationMethod] = InterpolationMethod.LINEAR,
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE
) -> Number:
    """Interpolated percentile of the non-missing values of one bucket.

    Works on a copy, so the bucket's source array is left untouched.
    All-NaN buckets give NaN.
    """
    if not values:
        raise EmptyBucketError(f"Cannot take percentile {p} of an empty bucket")
    present = [v for v in values if not is_missing(v)]
    if not present:
        return MISSING
    return percentile(p, present, method=method, pivot=pivot)


# =============================================================================
# Series-level reducers
# =============================================================================

def reduce_buckets(
    buckets: Sequence[Bucket],
    values: Sequence,
    reducer: Callable[[list], Number]
) -> AggregationResult:
    """Apply ``reducer`` to every bucket's slice of ``values``."""
    return {bucket.timestamp: reducer(bucket.slice(values)) for bucket in buckets}


def _reduce_field(series: BucketedSeries, field: str, reducer: Callable, name: str) -> AggregationResult:
    result = reduce_buckets(series.buckets, series.array(field), reducer)
    logger.debug(f"{name}({field}) over {len(result)} {series.period} buckets for {series.symbol}")
    return result


def max_by_bucket(series: BucketedSeries, field: str) -> AggregationResult:
    return _reduce_field(series, field, bucket_max, "max")


def min_by_bucket(series: BucketedSeries, field: str) -> AggregationResult:
    return _reduce_field(series, field, bucket_min, "min")


def average_by_bucket(series: BucketedSeries, field: str) -> AggregationResult:
    return _reduce_field(series, field, bucket_average, "avg")


def sum_by_bucket(series: BucketedSeries, field: str) -> AggregationResult:
    return _reduce_field(series, field, bucket_sum, "sum")


def percentile_by_bucket(
    series: BucketedSeries,
    field: str,
    p: float,
    method: Union[str, InterpolationMethod] = InterpolationMethod.LINEAR,
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE
) -> AggregationResult:
    if p < 0:
        raise ValueError(f"Percentile must be >= 0, got {p}")
    return _reduce_field(
        series,
        field,
        lambda values: bucket_percentile(values, p, method=method, pivot=pivot),
        f"p{p:g}"
    )


def median_by_bucket(series: BucketedSeries, field: str, **kwargs) -> AggregationResult:
    return percentile_by_bucket(series, field, 50, **kwargs)


def spread_by_bucket(series: BucketedSeries, first_field: str, second_field: str) -> AggregationResult:
    """Open/close style spread over (first_field, second_field) pairs."""
    first = series.array(first_field)
    second = series.array(second_field)
    if len(first) != len(second):
        raise InconsistentLengthError(
            len(first), len(second), "Spread fields", first_name=first_field, second_name=second_field
        )

    pairs: List[Tuple[Number, Number]] = list(zip(first, second))
    result = reduce_buckets(series.buckets, pairs, bucket_spread)
    logger.debug(f"spread({first_field}|{second_field}) over {len(result)} {series.period} buckets for {series.symbol}")
    return result

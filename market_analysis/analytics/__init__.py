"""Calendar Bucketing and Statistical Aggregation

Partitions daily price series into calendar-aligned buckets and reduces them:
- Bucketing: ISO weeks, days and fixed multiples of either
- Reducers: max, min, avg, sum, percentile/median, open/close spread
- Deltas: trailing, paired and previous-close differences
- Order statistics: quicksort, binary min-heap, interpolated percentile
"""

from market_analysis.analytics.periods import Period, parse_period, WEEKLY, DAILY
from market_analysis.analytics.bucketing import (
    Bucket,
    BucketedSeries,
    group_by_period,
    group_record,
)
from market_analysis.analytics.aggregator import (
    PriceAggregator,
    FieldSelection,
    FunctionSelection,
    DERIVED_FIELDS,
)

__all__ = [
    'Period',
    'parse_period',
    'WEEKLY',
    'DAILY',
    'Bucket',
    'BucketedSeries',
    'group_by_period',
    'group_record',
    'PriceAggregator',
    'FieldSelection',
    'FunctionSelection',
    'DERIVED_FIELDS',
]

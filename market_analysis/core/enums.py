"""
Enumerations shared across the analysis engine and the CLI.
"""
from enum import Enum


class PriceField(str, Enum):
    """Per-record fields of a daily price series."""
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    ADJ_CLOSE = "adj_close"
    VOLUME = "volume"


class AggregationFunction(str, Enum):
    """Per-bucket reductions understood by the aggregator."""
    MAX = "max"
    MIN = "min"
    AVG = "avg"
    SUM = "sum"
    MEDIAN = "median"
    PERCENTILE = "percentile"
    SPREAD = "spread"


class PivotStrategy(str, Enum):
    """Pivot selection for quicksort partitioning."""
    LAST = "last"
    MEDIAN_OF_THREE = "median_of_three"
    RANDOM = "random"


class InterpolationMethod(str, Enum):
    """How a percentile falling between two order statistics is resolved."""
    LINEAR = "linear"
    LOWER = "lower"
    HIGHER = "higher"
    NEAREST = "nearest"
    MIDPOINT = "midpoint"


class GapPolicy(str, Enum):
    """What the bucketer does with calendar periods that hold no observations."""
    SKIP = "skip"
    EMPTY = "empty"


class PeriodUnit(Enum):
    """Calendar unit a bucket width is a multiple of."""
    DAY = "day"
    WEEK = "week"

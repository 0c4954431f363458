"""Price Aggregator

Orchestrates bucketing, delta derivation and per-bucket reduction for one
price record.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from market_analysis.analytics import deltas
from market_analysis.analytics.bucketing import BucketedSeries, group_record
from market_analysis.analytics.periods import Period, parse_period
from market_analysis.analytics.reducers import (
    AggregationResult,
    average_by_bucket,
    max_by_bucket,
    min_by_bucket,
    percentile_by_bucket,
    spread_by_bucket,
    sum_by_bucket,
)
from market_analysis.config import settings
from market_analysis.core.enums import (
    AggregationFunction,
    GapPolicy,
    InterpolationMethod,
    PivotStrategy,
    PriceField,
)
from market_analysis.core.exceptions import InputError
from market_analysis.models.price_record import PriceRecord
from market_analysis.logger import logger


def _trailing(field: PriceField, percentage: bool) -> Callable[[PriceRecord], List[float]]:
    compute = deltas.trailing_percentage_delta if percentage else deltas.trailing_delta
    return lambda record: compute(record.get_field(field))


# Fields computed from a record before bucketing
DERIVED_FIELDS: Dict[str, Callable[[PriceRecord], List[float]]] = {
    "high_prevclose_delta": lambda r: deltas.high_prevclose_delta(r.high, r.close),
    "high_prevclose_delta_pct": lambda r: deltas.high_prevclose_percentage_delta(r.high, r.close),
    "prevclose_low_delta": lambda r: deltas.prevclose_low_delta(r.low, r.close),
    "prevclose_low_delta_pct": lambda r: deltas.prevclose_low_percentage_delta(r.low, r.close),
    "high_open_delta": lambda r: deltas.high_open_delta(r.high, r.open),
    "high_open_delta_pct": lambda r: deltas.high_open_percentage_delta(r.high, r.open),
    "open_low_delta": lambda r: deltas.open_low_delta(r.open, r.low),
    "open_low_delta_pct": lambda r: deltas.open_low_percentage_delta(r.open, r.low),
}
for _field in PriceField:
    DERIVED_FIELDS[f"{_field.value}_delta"] = _trailing(_field, percentage=False)
    DERIVED_FIELDS[f"{_field.value}_delta_pct"] = _trailing(_field, percentage=True)


@dataclass(frozen=True)
class FieldSelection:
    """Which values to aggregate.

    Either one raw or derived field, or two raw fields (``first|second``)
    for compound calculations.
    """
    first: str
    second: Optional[str] = None

    @property
    def is_pair(self) -> bool:
        return self.second is not None

    @property
    def is_derived(self) -> bool:
        return self.first in DERIVED_FIELDS

    def __str__(self) -> str:
        return f"{self.first}|{self.second}" if self.is_pair else self.first


@dataclass(frozen=True)
class FunctionSelection:
    """Reduction to apply per bucket; ``p`` is set for percentiles."""
    function: AggregationFunction
    p: Optional[float] = None

    def __str__(self) -> str:
        if self.function == AggregationFunction.PERCENTILE:
            return f"p{self.p:g}"
        return self.function.value


class PriceAggregator:
    """Calendar-windowed statistics over a price record.

    Example usage:
        agg = PriceAggregator("weekly")
        weekly_high = agg.aggregate(
            record,
            FieldSelection("high"),
            FunctionSelection(AggregationFunction.MAX),
        )

        # Spread from the lowest open to the close of the highest-open day
        spread = agg.aggregate(
            record,
            FieldSelection("open", "close"),
            FunctionSelection(AggregationFunction.SPREAD),
        )
    """

    def __init__(
        self,
        period: Union[str, Period, None] = None,
        gap_policy: Union[str, GapPolicy, None] = None,
        pivot: Union[str, PivotStrategy, None] = None,
        interpolation: Union[str, InterpolationMethod, None] = None
    ):
        """Initialize aggregator.

        Unset arguments fall back to the ANALYSIS settings.

        Raises:
            InputError: If the period selector is invalid
            ValueError: If a policy or strategy name is invalid
        """
        config = settings.ANALYSIS
        period = period if period is not None else config.default_period
        self.period = parse_period(period) if isinstance(period, str) else period
        self.gap_policy = GapPolicy(gap_policy or config.gap_policy)
        self.pivot = PivotStrategy(pivot or config.pivot_strategy)
        self.interpolation = InterpolationMethod(interpolation or config.interpolation)

        logger.debug(
            f"PriceAggregator initialized: period={self.period}, gap_policy={self.gap_policy.value}, "
            f"pivot={self.pivot.value}, interpolation={self.interpolation.value}"
        )

    def group(self, record: PriceRecord) -> BucketedSeries:
        """Bucket every raw field of ``record``."""
        return group_record(record, self.period, self.gap_policy)

    def aggregate(
        self,
        record: PriceRecord,
        selection: FieldSelection,
        function: FunctionSelection
    ) -> AggregationResult:
        """Reduce the selected values of ``record`` per calendar bucket.

        Args:
            record: Price series for one symbol
            selection: Field, derived delta field, or field pair
            function: Per-bucket reduction

        Returns:
            Bucket start timestamp -> value, ascending

        Raises:
            InputError: If the selection and function do not fit together
            InconsistentLengthError: If the record's arrays differ in length
            BucketWidthError: If the period does not fit the series
        """
        self._validate_selection(selection, function)
        series = self.group(record)
        field, series = self._prepare_field(record, series, selection, function)

        if function.function == AggregationFunction.SPREAD:
            result = spread_by_bucket(series, selection.first, selection.second)
        else:
            result = self._reduce(series, field, function)

        logger.info(
            f"Aggregated {str(function)}({selection}) for {record.symbol}: "
            f"{len(result)} {self.period} buckets from {len(record)} records"
        )
        return result

    def _validate_selection(self, selection: FieldSelection, function: FunctionSelection) -> None:
        names = [selection.first] + ([selection.second] if selection.is_pair else [])
        raw = {f.value for f in PriceField}
        for name in names:
            if name not in raw and not (name in DERIVED_FIELDS and not selection.is_pair):
                raise InputError(f"Unknown price field '{name}'")

        if function.function == AggregationFunction.SPREAD and not selection.is_pair:
            raise InputError("The spread function needs two fields joined by '|', e.g. 'open|close'")

        if function.function == AggregationFunction.PERCENTILE and function.p is None:
            raise InputError("Percentile function requires a percentile value")

    def _prepare_field(
        self,
        record: PriceRecord,
        series: BucketedSeries,
        selection: FieldSelection,
        function: FunctionSelection
    ) -> Tuple[str, BucketedSeries]:
        """Attach the array the reducer works on and return its name."""
        if selection.is_pair:
            if function.function == AggregationFunction.SPREAD:
                return str(selection), series
            name = f"{selection.first}-{selection.second}"
            values = deltas.paired_delta(record.get_field(selection.first), record.get_field(selection.second))
            return name, series.with_field(name, values)

        if selection.is_derived:
            values = DERIVED_FIELDS[selection.first](record)
            return selection.first, series.with_field(selection.first, values)

        return selection.first, series

    def _reduce(self, series: BucketedSeries, field: str, function: FunctionSelection) -> AggregationResult:
        fn = function.function
        if fn == AggregationFunction.MAX:
            return max_by_bucket(series, field)
        if fn == AggregationFunction.MIN:
            return min_by_bucket(series, field)
        if fn == AggregationFunction.AVG:
            return average_by_bucket(series, field)
        if fn == AggregationFunction.SUM:
            return sum_by_bucket(series, field)
        if fn in (AggregationFunction.MEDIAN, AggregationFunction.PERCENTILE):
            p = 50 if fn == AggregationFunction.MEDIAN else function.p
            return percentile_by_bucket(
                series, field, p, method=self.interpolation, pivot=self.pivot
            )

        raise InputError(f"Unsupported aggregation function: {fn.value}")

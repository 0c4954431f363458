"""Calendar Bucketing

Partitions a time-ordered observation sequence into contiguous index ranges
aligned to calendar period boundaries (e.g. Monday 00:00 for ISO weeks).

Two passes: boundaries and index ranges are computed eagerly here, and
per-bucket slices are materialized on demand by ``BucketedSeries``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Union

from market_analysis.analytics.periods import Period, parse_period
from market_analysis.core.enums import GapPolicy
from market_analysis.core.exceptions import (
    BucketWidthError,
    InconsistentLengthError,
    UnorderedTimestampsError,
)
from market_analysis.models.price_record import PriceRecord
from market_analysis.logger import logger


@dataclass(frozen=True)
class Bucket:
    """Half-open index range ``[start, end)`` labeled with its period start."""
    timestamp: datetime
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def indices(self) -> range:
        return range(self.start, self.end)

    @property
    def is_empty(self) -> bool:
        return self.end == self.start

    def slice(self, values: Sequence) -> list:
        """Copy of this bucket's portion of ``values``."""
        return list(values[self.start:self.end])


def _validate(timestamps: Sequence[datetime], period: Period) -> None:
    """Fail fast before any bucket is built."""
    for i in range(1, len(timestamps)):
        if timestamps[i] <= timestamps[i - 1]:
            raise UnorderedTimestampsError(
                f"Timestamps must be strictly ascending: index {i} "
                f"({timestamps[i]}) does not follow {timestamps[i - 1]}"
            )

    start = period.align(timestamps[0])
    span = timestamps[-1] - start
    if period.width > span:
        raise BucketWidthError(
            f"Bucket exceeds span: period {period} ({period.width}) is wider than "
            f"the observed span {span} starting {start.isoformat()}"
        )

    if len(timestamps) > 1:
        # Sampling interval: tightest gap between consecutive observations
        sampling = min(curr - prev for prev, curr in zip(timestamps, timestamps[1:]))
        if period.width < sampling:
            raise BucketWidthError(
                f"Upsampling not supported: period {period} ({period.width}) is narrower "
                f"than the sampling interval {sampling}"
            )


def group_by_period(
    timestamps: Sequence[datetime],
    values: Sequence,
    period: Union[str, Period],
    gap_policy: Union[str, GapPolicy] = GapPolicy.SKIP
) -> List[Bucket]:
    """Group observations into calendar-aligned buckets.

    The first bucket starts at the beginning of the period containing the
    first timestamp; each later bucket starts one period after the previous
    boundary. The final partial bucket is always emitted.

    Args:
        timestamps: Ascending, deduplicated timestamps
        values: Values parallel to ``timestamps`` (only the length is used)
        period: Period or selector such as "weekly" or "2w"
        gap_policy: SKIP omits periods without observations; EMPTY emits
            an empty bucket for each of them

    Returns:
        Buckets in ascending timestamp order

    Raises:
        InconsistentLengthError: If the arrays differ in length
        UnorderedTimestampsError: If timestamps are not strictly ascending
        BucketWidthError: If the period is narrower than the sampling
            interval or wider than the observed span
    """
    if isinstance(period, str):
        period = parse_period(period)
    gap_policy = GapPolicy(gap_policy)

    if len(timestamps) != len(values):
        raise InconsistentLengthError(len(timestamps), len(values))
    if not timestamps:
        return []

    _validate(timestamps, period)

    width = period.width
    bucket_start = period.align(timestamps[0])
    boundary = bucket_start + width
    first = 0
    buckets: List[Bucket] = []

    for i, ts in enumerate(timestamps):
        if ts < boundary:
            continue

        buckets.append(Bucket(bucket_start, first, i))
        bucket_start, boundary = boundary, boundary + width

        # Periods with no observations
        while ts >= boundary:
            if gap_policy == GapPolicy.EMPTY:
                buckets.append(Bucket(bucket_start, i, i))
            bucket_start, boundary = boundary, boundary + width

        first = i

    buckets.append(Bucket(bucket_start, first, len(timestamps)))

    logger.debug(
        f"Grouped {len(timestamps)} observations into {len(buckets)} {period} buckets "
        f"(gap_policy={gap_policy.value})"
    )
    return buckets


@dataclass
class BucketedSeries:
    """Buckets plus borrowed references to the per-field arrays they index."""
    symbol: str
    period: Period
    buckets: List[Bucket]
    arrays: Dict[str, Sequence] = field(default_factory=dict)
    length: Optional[int] = None

    def __post_init__(self):
        if self.length is None:
            self.length = self.buckets[-1].end if self.buckets else 0

    def __len__(self) -> int:
        return len(self.buckets)

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    @property
    def timestamps(self) -> List[datetime]:
        return [bucket.timestamp for bucket in self.buckets]

    def array(self, name: str) -> Sequence:
        try:
            return self.arrays[name]
        except KeyError:
            raise KeyError(
                f"Unknown field '{name}'. Available: {', '.join(sorted(self.arrays))}"
            ) from None

    def slice(self, name: str, bucket: Bucket) -> list:
        """Values of one field inside one bucket."""
        return bucket.slice(self.array(name))

    def values(self, name: str) -> List[list]:
        """Per-bucket slices of one field, in bucket order."""
        values = self.array(name)
        return [bucket.slice(values) for bucket in self.buckets]

    def with_field(self, name: str, values: Sequence) -> "BucketedSeries":
        """Same buckets with an extra (e.g. derived delta) array attached.

        Raises:
            InconsistentLengthError: If ``values`` does not cover the series
        """
        if len(values) != self.length:
            raise InconsistentLengthError(
                self.length, len(values), f"Field '{name}'", first_name="series", second_name=name
            )
        arrays = dict(self.arrays)
        arrays[name] = values
        return BucketedSeries(self.symbol, self.period, self.buckets, arrays, self.length)


def group_record(
    record: PriceRecord,
    period: Union[str, Period],
    gap_policy: Union[str, GapPolicy] = GapPolicy.SKIP
) -> BucketedSeries:
    """Bucket every field of a price record at once."""
    if isinstance(period, str):
        period = parse_period(period)

    record.validate()
    buckets = group_by_period(record.timestamps, record.close, period, gap_policy)
    return BucketedSeries(
        symbol=record.symbol,
        period=period,
        buckets=buckets,
        arrays=record.fields(),
        length=len(record),
    )

"""Unit tests for calendar bucketing."""
from datetime import datetime, timedelta, timezone

import pytest

from market_analysis.analytics.bucketing import Bucket, BucketedSeries, group_by_period, group_record
from market_analysis.analytics.periods import WEEKLY, parse_period
from market_analysis.core.enums import GapPolicy
from market_analysis.core.exceptions import (
    BucketWidthError,
    InconsistentLengthError,
    MarketAnalysisError,
    UnorderedTimestampsError,
)
from tests.fixtures.synthetic_data import weekday_timestamps


UTC = timezone.utc


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


def flatten(buckets):
    return [i for bucket in buckets for i in bucket.indices]


# ============================================================================
# Weekly grouping
# ============================================================================

def test_weekly_grouping_partial_first_week():
    """First bucket aligns to Monday even when data starts mid-week."""
    timestamps = weekday_timestamps(utc(2022, 1, 5), 18)  # Wed 5th .. Fri 28th
    values = list(range(len(timestamps)))

    buckets = group_by_period(timestamps, values, "weekly")

    assert [b.timestamp for b in buckets] == [
        utc(2022, 1, 3), utc(2022, 1, 10), utc(2022, 1, 17), utc(2022, 1, 24)
    ]
    assert [len(b) for b in buckets] == [3, 5, 5, 5]
    assert buckets[0] == Bucket(utc(2022, 1, 3), 0, 3)


def test_ranges_cover_every_index_once():
    """Concatenated ranges reproduce 0..n and starts advance by one period."""
    timestamps = weekday_timestamps(utc(2021, 11, 3), 60)
    values = [float(i) for i in range(60)]

    buckets = group_by_period(timestamps, values, WEEKLY)

    assert flatten(buckets) == list(range(60))
    starts = [b.timestamp for b in buckets]
    for prev, curr in zip(starts, starts[1:]):
        assert curr - prev == timedelta(weeks=1)
    for prev, curr in zip(buckets, buckets[1:]):
        assert prev.end == curr.start


def test_final_partial_bucket_emitted():
    timestamps = weekday_timestamps(utc(2022, 1, 3), 11)  # two weeks + Monday
    buckets = group_by_period(timestamps, timestamps, WEEKLY)
    assert [len(b) for b in buckets] == [5, 5, 1]
    assert buckets[-1].end == 11


def test_weekend_observations_stay_in_their_week():
    timestamps = [utc(2022, 1, 3), utc(2022, 1, 8), utc(2022, 1, 9, 23, 59), utc(2022, 1, 10), utc(2022, 1, 12)]
    buckets = group_by_period(timestamps, [1, 2, 3, 4, 5], WEEKLY)
    assert [(b.start, b.end) for b in buckets] == [(0, 3), (3, 5)]


def test_intraday_first_timestamp_aligns_to_midnight_monday():
    timestamps = [utc(2022, 1, 5, 15, 30), utc(2022, 1, 6, 15, 30), utc(2022, 1, 14, 15, 30)]
    buckets = group_by_period(timestamps, [1, 2, 3], WEEKLY)
    assert buckets[0].timestamp == utc(2022, 1, 3)
    assert buckets[1].timestamp == utc(2022, 1, 10)


def test_two_week_buckets():
    timestamps = weekday_timestamps(utc(2022, 1, 3), 20)
    buckets = group_by_period(timestamps, timestamps, "2w")
    assert [b.timestamp for b in buckets] == [utc(2022, 1, 3), utc(2022, 1, 17)]
    assert [len(b) for b in buckets] == [10, 10]


def test_daily_buckets():
    timestamps = weekday_timestamps(utc(2022, 1, 3), 5)
    buckets = group_by_period(timestamps, timestamps, "1d")
    assert [len(b) for b in buckets] == [1, 1, 1, 1, 1]
    assert [b.timestamp for b in buckets] == timestamps


def test_daily_buckets_friday_start():
    """A weekend right after the first observation does not count as the sampling interval."""
    timestamps = weekday_timestamps(utc(2022, 1, 7), 10)  # Fri 7th .. Thu 20th
    buckets = group_by_period(timestamps, timestamps, "daily")
    assert [b.timestamp for b in buckets] == timestamps
    assert [len(b) for b in buckets] == [1] * 10


def test_daily_buckets_after_holiday():
    timestamps = [utc(2022, 1, 14), utc(2022, 1, 18), utc(2022, 1, 19), utc(2022, 1, 20)]
    buckets = group_by_period(timestamps, [1, 2, 3, 4], "1d")
    assert len(buckets) == 4


def test_empty_input():
    assert group_by_period([], [], WEEKLY) == []


# ============================================================================
# Validation
# ============================================================================

def test_inconsistent_lengths():
    timestamps = weekday_timestamps(utc(2022, 1, 3), 5)
    with pytest.raises(InconsistentLengthError) as exc_info:
        group_by_period(timestamps, [1, 2, 3, 4], WEEKLY)

    message = str(exc_info.value)
    assert "5" in message and "4" in message
    assert exc_info.value.first_length == 5
    assert exc_info.value.second_length == 4


def test_bucket_exceeds_span():
    """One Monday-to-Friday week spans only four days."""
    timestamps = weekday_timestamps(utc(2022, 1, 3), 5)
    with pytest.raises(BucketWidthError, match="exceeds span"):
        group_by_period(timestamps, timestamps, WEEKLY)


def test_single_observation_exceeds_span():
    with pytest.raises(BucketWidthError):
        group_by_period([utc(2022, 1, 3)], [1.0], WEEKLY)


def test_upsampling_not_supported():
    timestamps = [utc(2022, 1, 3), utc(2022, 1, 17), utc(2022, 1, 31)]
    with pytest.raises(BucketWidthError, match="Upsampling not supported"):
        group_by_period(timestamps, [1, 2, 3], "1d")


def test_unsorted_timestamps_rejected():
    timestamps = [utc(2022, 1, 10), utc(2022, 1, 3), utc(2022, 1, 20)]
    with pytest.raises(UnorderedTimestampsError, match="strictly ascending"):
        group_by_period(timestamps, [1, 2, 3], WEEKLY)


def test_unsorted_timestamps_is_market_analysis_error():
    timestamps = [utc(2022, 1, 3), utc(2022, 1, 3), utc(2022, 1, 20)]
    with pytest.raises(MarketAnalysisError):
        group_by_period(timestamps, [1, 2, 3], WEEKLY)


def test_invalid_gap_policy():
    timestamps = weekday_timestamps(utc(2022, 1, 3), 10)
    with pytest.raises(ValueError):
        group_by_period(timestamps, timestamps, WEEKLY, gap_policy="fill")


# ============================================================================
# Gaps
# ============================================================================

def gapped_timestamps():
    """Weeks of Jan 3 and Jan 17 only; the week of Jan 10 has no data."""
    return weekday_timestamps(utc(2022, 1, 3), 5) + weekday_timestamps(utc(2022, 1, 17), 5)


def test_gap_skipped_by_default():
    timestamps = gapped_timestamps()
    buckets = group_by_period(timestamps, timestamps, WEEKLY)

    assert [b.timestamp for b in buckets] == [utc(2022, 1, 3), utc(2022, 1, 17)]
    assert flatten(buckets) == list(range(10))


def test_gap_emits_empty_bucket():
    timestamps = gapped_timestamps()
    buckets = group_by_period(timestamps, timestamps, WEEKLY, gap_policy=GapPolicy.EMPTY)

    assert [b.timestamp for b in buckets] == [utc(2022, 1, 3), utc(2022, 1, 10), utc(2022, 1, 17)]
    assert buckets[1].is_empty
    assert buckets[1].start == buckets[1].end == 5
    assert flatten(buckets) == list(range(10))


# ============================================================================
# BucketedSeries
# ============================================================================

def test_group_record_slices_fields(sample_record, week_starts):
    series = group_record(sample_record, "weekly")

    assert len(series) == 3
    assert series.timestamps == week_starts
    assert series.values("open")[0] == [100.0, 101.0, 102.0, 103.0, 104.0]
    assert series.slice("volume", series.buckets[2]) == [1100, 1110, 1120, 1130, 1140]


def test_group_record_does_not_mutate_input(sample_record):
    before = list(sample_record.close)
    series = group_record(sample_record, "weekly")
    series.values("close")[0].append(0.0)
    assert sample_record.close == before


def test_group_record_inconsistent_field(sample_record):
    sample_record.volume.pop()
    with pytest.raises(InconsistentLengthError):
        group_record(sample_record, "weekly")


def test_with_field_attaches_derived_array(sample_record):
    series = group_record(sample_record, "weekly")
    derived = series.with_field("double", [2 * v for v in sample_record.close])

    assert derived.values("double")[0][0] == 202.0
    assert "double" not in series.arrays


def test_with_field_length_mismatch(sample_record):
    series = group_record(sample_record, "weekly")
    with pytest.raises(InconsistentLengthError, match="series array: 15, length of the short array: 2"):
        series.with_field("short", [1.0, 2.0])


def test_unknown_field(sample_record):
    series = group_record(sample_record, parse_period("1w"))
    with pytest.raises(KeyError):
        series.values("bid")


def test_empty_series_length():
    series = BucketedSeries(symbol="X", period=WEEKLY, buckets=[])
    assert len(series) == 0
    assert series.length == 0

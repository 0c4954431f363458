"""Core exceptions and enumerations."""
from market_analysis.core.exceptions import (
    MarketAnalysisError,
    InconsistentLengthError,
    UnorderedTimestampsError,
    BucketWidthError,
    EmptyQueueError,
    EmptyBucketError,
    NumericConversionError,
    MissingValueError,
    SourceDataError,
    InputError,
)

__all__ = [
    "MarketAnalysisError",
    "InconsistentLengthError",
    "UnorderedTimestampsError",
    "BucketWidthError",
    "EmptyQueueError",
    "EmptyBucketError",
    "NumericConversionError",
    "MissingValueError",
    "SourceDataError",
    "InputError",
]

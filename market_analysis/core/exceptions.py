"""
Custom exceptions for the market analysis engine.

All custom exceptions should be defined here for easy discovery
and consistent error handling throughout the application.
"""


class MarketAnalysisError(Exception):
    """Base exception for all market analysis errors."""
    pass


class InconsistentLengthError(MarketAnalysisError, ValueError):
    """Raised when parallel input arrays have different lengths."""

    def __init__(
        self,
        first_length: int,
        second_length: int,
        message: str = "",
        first_name: str = "timestamps",
        second_name: str = "values"
    ):
        self.first_length = first_length
        self.second_length = second_length
        detail = (
            f"Length of the {first_name} array: {first_length}, "
            f"length of the {second_name} array: {second_length}"
        )
        super().__init__(f"{message}: {detail}" if message else detail)


class UnorderedTimestampsError(MarketAnalysisError, ValueError):
    """Raised when timestamps are not strictly ascending."""
    pass


class BucketWidthError(MarketAnalysisError, ValueError):
    """Raised when the requested period cannot partition the observed series."""
    pass


class EmptyQueueError(MarketAnalysisError, IndexError):
    """Raised when extracting an order statistic from an empty heap or array."""
    pass


class EmptyBucketError(EmptyQueueError):
    """Raised when a reducer that needs at least one value meets an empty bucket."""
    pass


class NumericConversionError(MarketAnalysisError):
    """Raised when a numeric widening that should always succeed fails.

    Indicates a broken upstream precondition, not bad user input.
    """
    pass


class MissingValueError(MarketAnalysisError):
    """Raised when a source record lacks a required field."""
    pass


class SourceDataError(MarketAnalysisError):
    """Raised when source price data cannot be read or parsed."""
    pass


class InputError(MarketAnalysisError, ValueError):
    """Raised when a CLI selector cannot be parsed."""
    pass

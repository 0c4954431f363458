"""
Daily price data models
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Sequence, Union

from pydantic import BaseModel, Field

from market_analysis.core.enums import PriceField
from market_analysis.core.exceptions import InconsistentLengthError, SourceDataError


Number = Union[int, float]


class DailyBar(BaseModel):
    """One daily OHLCV record as delivered by a data source"""
    timestamp: datetime
    open: float = Field(gt=0)
    high: float = Field(gt=0)
    low: float = Field(gt=0)
    close: float = Field(gt=0)
    adj_close: float = Field(gt=0)
    volume: int = Field(ge=0)


@dataclass
class PriceRecord:
    """Parallel per-field arrays for one symbol.

    Timestamps are ascending and deduplicated; every field array has the
    same length as ``timestamps``.
    """
    symbol: str
    timestamps: List[datetime] = field(default_factory=list)
    open: List[float] = field(default_factory=list)
    high: List[float] = field(default_factory=list)
    low: List[float] = field(default_factory=list)
    close: List[float] = field(default_factory=list)
    adj_close: List[float] = field(default_factory=list)
    volume: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.timestamps)

    @classmethod
    def from_bars(cls, symbol: str, bars: Sequence[DailyBar]) -> "PriceRecord":
        """Build a record from bars, sorting by timestamp.

        Raises:
            SourceDataError: If two bars share a timestamp
        """
        ordered = sorted(bars, key=lambda bar: bar.timestamp)
        for prev, curr in zip(ordered, ordered[1:]):
            if prev.timestamp == curr.timestamp:
                raise SourceDataError(
                    f"Duplicate record for {symbol} at {curr.timestamp.isoformat()}"
                )

        return cls(
            symbol=symbol.upper(),
            timestamps=[bar.timestamp for bar in ordered],
            open=[bar.open for bar in ordered],
            high=[bar.high for bar in ordered],
            low=[bar.low for bar in ordered],
            close=[bar.close for bar in ordered],
            adj_close=[bar.adj_close for bar in ordered],
            volume=[bar.volume for bar in ordered],
        )

    def get_field(self, name: Union[str, PriceField]) -> List[Number]:
        """Return the array for one price field."""
        key = PriceField(name).value
        return getattr(self, key)

    def fields(self) -> Dict[str, List[Number]]:
        """Return every field array keyed by field name."""
        return {f.value: getattr(self, f.value) for f in PriceField}

    def validate(self) -> None:
        """Check that every field array matches the timestamps.

        Raises:
            InconsistentLengthError: Naming the first mismatched field
        """
        n = len(self.timestamps)
        for name, values in self.fields().items():
            if len(values) != n:
                raise InconsistentLengthError(
                    n, len(values), f"Field '{name}' of {self.symbol}", second_name=name
                )

    def between(self, start: datetime = None, end: datetime = None) -> "PriceRecord":
        """Return a copy restricted to ``start <= timestamp <= end``."""
        keep = [
            i for i, ts in enumerate(self.timestamps)
            if (start is None or ts >= start) and (end is None or ts <= end)
        ]
        return PriceRecord(
            symbol=self.symbol,
            timestamps=[self.timestamps[i] for i in keep],
            open=[self.open[i] for i in keep],
            high=[self.high[i] for i in keep],
            low=[self.low[i] for i in keep],
            close=[self.close[i] for i in keep],
            adj_close=[self.adj_close[i] for i in keep],
            volume=[self.volume[i] for i in keep],
        )

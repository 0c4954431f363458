"""Calendar Periods

Parsing of period selectors and alignment of timestamps to period starts.
Bucket widths are fixed multiples of a day or an ISO week.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from market_analysis.core.enums import PeriodUnit
from market_analysis.core.exceptions import InputError


_ALIASES = {
    "daily": "1d",
    "weekly": "1w",
    "biweekly": "2w",
}

_UNIT_DAYS = {
    PeriodUnit.DAY: 1,
    PeriodUnit.WEEK: 7,
}


@dataclass(frozen=True)
class Period:
    """A bucket width: ``count`` consecutive calendar ``unit``s."""
    unit: PeriodUnit
    count: int = 1

    def __post_init__(self):
        if self.count <= 0:
            raise ValueError(f"Period count must be positive, got {self.count}")

    @property
    def width(self) -> timedelta:
        return timedelta(days=_UNIT_DAYS[self.unit] * self.count)

    @property
    def label(self) -> str:
        return f"{self.count}{'w' if self.unit == PeriodUnit.WEEK else 'd'}"

    def align(self, timestamp: datetime) -> datetime:
        """Start of the calendar unit containing ``timestamp``.

        Weeks start Monday 00:00 (ISO), days at midnight, in the timestamp's
        own timezone.
        """
        midnight = timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
        if self.unit == PeriodUnit.WEEK:
            return midnight - timedelta(days=timestamp.weekday())
        return midnight

    def __str__(self) -> str:
        return self.label


WEEKLY = Period(PeriodUnit.WEEK)
DAILY = Period(PeriodUnit.DAY)


def parse_period(selector: str) -> Period:
    """Parse a period selector.

    Accepts ``daily``, ``weekly``, ``biweekly`` or ``<N>d`` / ``<N>w``.

    Raises:
        InputError: If the selector is not recognised

    Examples:
        >>> parse_period("weekly")
        Period(unit=<PeriodUnit.WEEK: 'week'>, count=1)

        >>> parse_period("2w").width
        datetime.timedelta(days=14)
    """
    if not selector:
        raise InputError("Aggregation period cannot be empty")

    normalized = _ALIASES.get(selector.strip().lower(), selector.strip().lower())
    match = re.match(r'^(\d+)([dw])$', normalized)
    if not match:
        raise InputError(
            f"Invalid aggregation period: '{selector}'. "
            f"Expected one of {', '.join(_ALIASES)} or <number><unit> (e.g. '1w', '5d')"
        )

    count = int(match.group(1))
    if count == 0:
        raise InputError(f"Aggregation period must be at least one unit, got '{selector}'")

    unit = PeriodUnit.WEEK if match.group(2) == "w" else PeriodUnit.DAY
    return Period(unit, count)

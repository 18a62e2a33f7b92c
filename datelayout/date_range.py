"""Half-open date ranges used to filter recovered dates."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .errors import ConfigurationError

DEFAULT_WINDOW_DAYS = 31


@dataclass(frozen=True)
class DateRange:
    """``[start, end)``; either bound may be missing."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None


def _aware(date: datetime) -> datetime:
    if date.tzinfo is None:
        return date.replace(tzinfo=timezone.utc)
    return date


def is_in_range(date: datetime, date_range: Optional[DateRange]) -> bool:
    """Return True when ``date`` falls inside ``date_range``.

    The start is inclusive and the end exclusive. A missing range, or
    one without bounds, accepts every date.
    """
    if date_range is None or date_range.is_empty:
        return True
    date = _aware(date)
    if date_range.start is not None and date < _aware(date_range.start):
        return False
    if date_range.end is not None and date >= _aware(date_range.end):
        return False
    return True


def default_range(now: Optional[datetime] = None) -> DateRange:
    """Return the rolling window ``[now - 31 days, now)``."""
    end = _aware(now) if now is not None else datetime.now(timezone.utc)
    return DateRange(start=end - timedelta(days=DEFAULT_WINDOW_DAYS), end=end)


def validate_range(date_range: Optional[DateRange]) -> None:
    if date_range is None or date_range.start is None or date_range.end is None:
        return
    if _aware(date_range.start) > _aware(date_range.end):
        raise ConfigurationError(
            f"Start date ({date_range.start.isoformat()}) cannot be after "
            f"end date ({date_range.end.isoformat()})",
            option="--start",
        )


def resolve_range(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Return the range to filter with.

    When neither bound is given the default 31-day window ending now is
    used; otherwise the bounds are taken as given and checked for order.
    """
    if start is None and end is None:
        return default_range(now)
    date_range = DateRange(
        start=_aware(start) if start is not None else None,
        end=_aware(end) if end is not None else None,
    )
    validate_range(date_range)
    return date_range


def describe_range(date_range: Optional[DateRange]) -> str:
    if date_range is None or date_range.is_empty:
        return "all dates"
    start = date_range.start.isoformat() if date_range.start else "beginning"
    end = date_range.end.isoformat() if date_range.end else "end"
    return f"from {start} up to {end}"

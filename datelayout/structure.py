"""Format tables that place a date into directories and filenames.

A :class:`Granularity` decides how much of a date lives in the directory
path and how much is left for the filename. ``FORMATS`` is the single
table both directions read from: :mod:`datelayout.organize` uses it to
build output paths and :mod:`datelayout.date_mapper` uses it to read
dates back out of input paths.
"""
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import ConfigurationError

# Month and day are written as plain integers (``M``/``D``). Flip this to
# get ``MM``/``DD`` everywhere; decoding accepts either width.
ZERO_PAD = False

DATE_FIELDS = ("year", "month", "day")


class Granularity(str, Enum):
    NONE = "none"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"

    @classmethod
    def parse(cls, value, option: Optional[str] = None) -> "Granularity":
        """Return the member for ``value`` (a member or its string value)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(g.value for g in cls)
            raise ConfigurationError(
                f"Invalid structure: {value}. Valid options are: {allowed}",
                option=option,
            ) from None


@dataclass(frozen=True)
class StructureFormat:
    directory_fields: Tuple[str, ...]
    filename_fields: Tuple[str, ...]
    date_format: Optional[str]
    parse_format: str


FORMATS: Dict[Granularity, StructureFormat] = {
    Granularity.NONE: StructureFormat((), ("year", "month", "day"), "YYYY-M-D", "YYYY-M-D-HHmm"),
    Granularity.YEAR: StructureFormat(("year",), ("month", "day"), "M-D", "M-D-HHmm"),
    Granularity.MONTH: StructureFormat(("year", "month"), ("day",), "D", "D-HHmm"),
    Granularity.DAY: StructureFormat(("year", "month", "day"), (), None, "HHmm"),
}

_missing = set(Granularity) - set(FORMATS)
if _missing:
    raise RuntimeError(f"no structure format for {sorted(g.value for g in _missing)}")


def format_field(name: str, value: int) -> str:
    if name == "year":
        return f"{value:04d}"
    if ZERO_PAD:
        return f"{value:02d}"
    return str(value)


def localize(date: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Return ``date`` expressed in ``tz``.

    Naive datetimes are taken to be UTC, which is what the decoder
    produces.
    """
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.astimezone(tz or timezone.utc)


def directory_segments(date: datetime, granularity: Granularity, tz: Optional[tzinfo] = None) -> List[str]:
    """Return the directory names ``date`` is filed under.

    Examples:
        ``month`` gives ``['2024', '3']`` for 2024-03-15.
    """
    local = localize(date, tz)
    fmt = FORMATS[Granularity.parse(granularity)]
    return [format_field(f, getattr(local, f)) for f in fmt.directory_fields]


def date_token(date: datetime, granularity: Granularity, tz: Optional[tzinfo] = None) -> str:
    """Return the part of the date that goes into the filename.

    Raises:
        ConfigurationError: for ``day``, where the directory path already
            holds the full date and a filename date is not allowed.
    """
    granularity = Granularity.parse(granularity)
    fmt = FORMATS[granularity]
    if not fmt.filename_fields:
        raise ConfigurationError(
            f'Cannot use date in filename when output structure is "{granularity.value}"',
            option="--output-filename-options",
        )
    local = localize(date, tz)
    return "-".join(format_field(f, getattr(local, f)) for f in fmt.filename_fields)


def time_token(date: datetime, tz: Optional[tzinfo] = None) -> str:
    local = localize(date, tz)
    return f"{local.hour:02d}{local.minute:02d}"

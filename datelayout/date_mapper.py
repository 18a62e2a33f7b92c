"""Helpers that map organized file paths back to dates.

This module inverts :mod:`datelayout.structure`: given a path relative
to the input root and the granularity the tree was written with, it
reads the date fields from the leading directories and the leading
filename tokens.

Every helper returns ``None`` when a date cannot be recovered so the
traversal can skip one bad file and keep going.
"""

import re
from datetime import datetime, timezone, tzinfo
from pathlib import PurePath
from typing import Dict, Optional, Sequence

from .structure import DATE_FIELDS, FORMATS, Granularity

_EDGE_RE = re.compile(r"^[\W_]+|[\W_]+$")
_SPLIT_RE = re.compile(r"[-_]")
_NUMBER_RE = re.compile(r"[0-9]+")
_TIME_RE = re.compile(r"([0-9]{2})([0-9]{2})")

_LIMITS = {
    "month": (1, 12),
    "day": (1, 31),
    "hour": (0, 23),
    "minute": (0, 59),
}


def _to_int(value: str) -> Optional[int]:
    if value is None or not _NUMBER_RE.fullmatch(value):
        return None
    return int(value)


def _in_limits(fields: Dict[str, int]) -> bool:
    for name, (low, high) in _LIMITS.items():
        if name in fields and not low <= fields[name] <= high:
            return False
    return True


def build_date(fields: Dict[str, int], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Build a UTC datetime from local date fields, or ``None``.

    The fields are read in ``tz`` (UTC when omitted). The result is
    converted back into ``tz`` and compared field by field, which rejects
    dates such as February 30th and local times skipped by a DST change
    instead of letting them drift.
    """
    tz = tz or timezone.utc
    if not _in_limits(fields):
        return None
    try:
        local = datetime(
            fields["year"], fields["month"], fields["day"],
            fields.get("hour", 0), fields.get("minute", 0),
            tzinfo=tz,
        )
    except ValueError:
        return None
    utc = local.astimezone(timezone.utc)
    check = utc.astimezone(tz)
    if (check.year, check.month, check.day, check.hour, check.minute) != (
        local.year, local.month, local.day, local.hour, local.minute
    ):
        return None
    return utc


def clean_token(token: str) -> str:
    """Strip leading/trailing non-alphanumeric characters."""
    return _EDGE_RE.sub("", token or "")


def date_from_string(
    token: str,
    granularity: Granularity,
    parse_time: bool,
    prefix: Sequence[int] = (),
    tz: Optional[tzinfo] = None,
) -> Optional[datetime]:
    """Parse the date carried by a filename stem.

    Args:
        token: Filename without extension, e.g. ``15-0830-note``.
        granularity: Structure the file was written with.
        parse_time: Read an ``HHmm`` token after the date fields. When
            False the time is midnight.
        prefix: Date fields already taken from the directory path, in
            year/month/day order.
        tz: Timezone the fields are expressed in.

    Returns:
        An aware UTC :class:`datetime.datetime`, or ``None``.
    """
    if not token:
        return None
    fmt = FORMATS[Granularity.parse(granularity)]
    if len(prefix) != len(fmt.directory_fields):
        return None

    fields: Dict[str, int] = dict(zip(DATE_FIELDS, prefix))
    parts = _SPLIT_RE.split(clean_token(token))

    needed = len(fmt.filename_fields) + (1 if parse_time else 0)
    if len(parts) < needed:
        return None

    for name, part in zip(fmt.filename_fields, parts):
        value = _to_int(part)
        if value is None:
            return None
        fields[name] = value

    if parse_time:
        m = _TIME_RE.fullmatch(parts[len(fmt.filename_fields)])
        if not m:
            return None
        fields["hour"] = int(m.group(1))
        fields["minute"] = int(m.group(2))

    return build_date(fields, tz)


def date_from_path(
    relative_path,
    granularity: Granularity,
    parse_time: bool,
    tz: Optional[tzinfo] = None,
) -> Optional[datetime]:
    """Recover the date of a file from its path below the input root.

    Example:
        ``date_from_path('2024/3/15-0830-note.txt', 'month', True)``
        returns ``2024-03-15 08:30 UTC``.
    """
    granularity = Granularity.parse(granularity)
    path = PurePath(relative_path)
    fmt = FORMATS[granularity]
    count = len(fmt.directory_fields)

    dirs = path.parts[:-1]
    if len(dirs) < count:
        return None
    prefix = []
    for part in dirs[:count]:
        value = _to_int(part)
        if value is None:
            return None
        prefix.append(value)

    return date_from_string(path.stem, granularity, parse_time, prefix=prefix, tz=tz)


def strip_date_tokens(stem: str, granularity: Granularity, parse_time: bool) -> str:
    """Return ``stem`` without the leading date and time tokens.

    The stem is returned unchanged when it does not start with the
    tokens the granularity puts into filenames, e.g. ``draft`` stays
    ``draft`` while ``15-0830-abc-note`` becomes ``abc-note`` for
    ``month`` with ``parse_time``.
    """
    fmt = FORMATS[Granularity.parse(granularity)]
    parts = _SPLIT_RE.split(clean_token(stem))
    count = len(fmt.filename_fields)
    if len(parts) < count or any(_to_int(p) is None for p in parts[:count]):
        return stem
    if parse_time:
        if len(parts) <= count or not _TIME_RE.fullmatch(parts[count]):
            return stem
        count += 1
    return "-".join(parts[count:])

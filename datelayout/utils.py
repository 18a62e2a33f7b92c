"""Utility helpers for parsing user supplied dates and hashing files.

``parse_date`` is used for the ``--start``/``--end`` bounds. It tries a
short list of explicit formats first and falls back to
``dateutil.parser`` for anything else.
"""

from datetime import datetime, tzinfo
import hashlib
import re
from pathlib import Path
from typing import Optional

from dateutil import parser as dparser

EXPLICIT_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
]

HASH_LENGTH = 8


def parse_date(s: str, tz: Optional[tzinfo] = None) -> datetime | None:
    """Parse a date given on the command line or in a config file.

    Naive results are interpreted in ``tz`` when given. Returns ``None``
    when the value cannot be parsed.
    """
    if not s or not isinstance(s, str):
        return None
    s = s.strip()
    # bare numbers like "15" are not dates
    if re.fullmatch(r"\d{1,6}", s):
        return None

    dt = None
    for fmt in EXPLICIT_FORMATS:
        try:
            dt = datetime.strptime(s, fmt)
            break
        except ValueError:
            pass

    if dt is None:
        try:
            dt = dparser.parse(s)
        except (ValueError, OverflowError):
            return None

    if dt.tzinfo is None and tz is not None:
        dt = dt.replace(tzinfo=tz)
    return dt


def file_hash(path: Path, length: int = HASH_LENGTH) -> str:
    """Return the first ``length`` hex digits of the SHA-256 of ``path``."""
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.hexdigest()[:length]

from datetime import datetime, timezone
from pathlib import Path

import pytest
from dateutil import tz

from datelayout import date_mapper, organize, structure
from datelayout.structure import Granularity

UTC = timezone.utc


def test_month_path_with_time():
    dt = date_mapper.date_from_path("2024/3/15-0830-note.txt", "month", parse_time=True)
    assert dt == datetime(2024, 3, 15, 8, 30, tzinfo=UTC)


def test_time_defaults_to_midnight():
    dt = date_mapper.date_from_path("2024/3/15-0830-note.txt", "month", parse_time=False)
    assert dt == datetime(2024, 3, 15, tzinfo=UTC)


@pytest.mark.parametrize("path, granularity, expected", [
    ("2023-10-26_file1.txt", "none", datetime(2023, 10, 26, tzinfo=UTC)),
    ("notes/2023-10-26-a.md", "none", datetime(2023, 10, 26, tzinfo=UTC)),
    ("2023/10-26-a.md", "year", datetime(2023, 10, 26, tzinfo=UTC)),
    ("2023/10/26/anything.md", "day", datetime(2023, 10, 26, tzinfo=UTC)),
    ("2023/03/07-a.md", "month", datetime(2023, 3, 7, tzinfo=UTC)),
])
def test_date_without_time(path, granularity, expected):
    assert date_mapper.date_from_path(path, granularity, parse_time=False) == expected


def test_day_structure_reads_time_from_filename():
    dt = date_mapper.date_from_path("2023/10/26/2315-abc-note.md", "day", parse_time=True)
    assert dt == datetime(2023, 10, 26, 23, 15, tzinfo=UTC)


def test_leading_and_trailing_punctuation_is_ignored():
    dt = date_mapper.date_from_string("__2024-1-2-0930--", Granularity.NONE, parse_time=True)
    assert dt == datetime(2024, 1, 2, 9, 30, tzinfo=UTC)


@pytest.mark.parametrize("path, granularity, parse_time", [
    ("2024-2-30-note.md", "none", False),     # no February 30th
    ("2023-2-29-note.md", "none", False),     # not a leap year
    ("2024-13-1-note.md", "none", False),
    ("2024-0-1-note.md", "none", False),
    ("2024-1-32-note.md", "none", False),
    ("2024-x-1-note.md", "none", False),
    ("2024-3-15.md", "none", True),           # time token missing
    ("2024-3-15-2460-a.md", "none", True),    # minute out of range
    ("2024-3-15-2400-a.md", "none", True),    # hour out of range
    ("2024-3-15-ab30-a.md", "none", True),
    ("2024/3/15-0830x-note.md", "month", True),
    ("2024/3/15-08305-note.md", "month", True),
    ("2024/3/15-١٢٣٤-note.md", "month", True),  # non-ASCII digits
    ("2024/3/١٥-note.md", "month", False),
    ("15-0830-note.md", "month", True),       # no year/month directories
    ("abcd/3/15-note.md", "month", False),
    ("2024/13/15-note.md", "month", False),
    ("2024/3/note.md", "month", False),
    ("2024/3/31/note.md", "day", True),       # time token missing
    ("2024/4/31/0830.md", "day", True),
    ("", "none", False),
])
def test_unparseable_paths_return_none(path, granularity, parse_time):
    assert date_mapper.date_from_path(path, granularity, parse_time) is None


def test_prefix_length_must_match_structure():
    assert date_mapper.date_from_string("15-0830", "month", True, prefix=(2024,)) is None


def test_fields_are_read_in_the_configured_timezone():
    ny = tz.gettz("America/New_York")
    dt = date_mapper.date_from_path("2024/3/14-2200-note.md", "month", True, tz=ny)
    assert dt == datetime(2024, 3, 15, 2, 0, tzinfo=UTC)


def test_nonexistent_local_time_is_rejected():
    """02:30 on 2024-03-10 does not exist in New York (clocks jump to 03:00)."""
    ny = tz.gettz("America/New_York")
    assert date_mapper.date_from_path("2024/3/10-0230-a.md", "month", True, tz=ny) is None
    assert date_mapper.date_from_path("2024/3/10-0330-a.md", "month", True, tz=ny) is not None


DATES = [
    datetime(2024, 3, 15, 8, 30, tzinfo=UTC),
    datetime(2000, 1, 1, 0, 0, tzinfo=UTC),
    datetime(2024, 2, 29, 23, 59, tzinfo=UTC),
    datetime(1999, 12, 31, 12, 5, tzinfo=UTC),
]


@pytest.mark.parametrize("granularity", list(Granularity))
@pytest.mark.parametrize("zone", ["Etc/UTC", "America/New_York", "Asia/Kolkata"])
def test_encoded_paths_decode_to_the_same_date(granularity, zone):
    """Writing a date into a path and reading it back gives the same instant.

    None of the sample dates fall into a repeated local hour.
    """
    tzinfo = tz.gettz(zone)
    if granularity is Granularity.DAY:
        options = ("time", "subject")
    else:
        options = ("date", "time", "subject")
    for dt in DATES:
        name = organize.construct_filename(
            dt, "note", "ab12cd34", "Weekly review",
            structure=granularity, filename_options=options, tz=tzinfo,
        )
        relative = Path(*structure.directory_segments(dt, granularity, tzinfo), name + ".md")
        assert date_mapper.date_from_path(relative, granularity, True, tz=tzinfo) == dt


def test_repeated_local_hour_reads_back_as_the_first_occurrence():
    """01:30 happens twice on 2024-11-03 in New York; the path cannot tell which."""
    ny = tz.gettz("America/New_York")
    first = datetime(2024, 11, 3, 5, 30, tzinfo=UTC)
    second = datetime(2024, 11, 3, 6, 30, tzinfo=UTC)
    assert structure.time_token(first, ny) == structure.time_token(second, ny) == "0130"
    assert date_mapper.date_from_path("2024/11/3-0130-a.md", "month", True, tz=ny) == first


@pytest.mark.parametrize("stem, granularity, parse_time, expected", [
    ("15-0830-abc-note", "month", True, "abc-note"),
    ("15-abc-note", "month", False, "abc-note"),
    ("3-15-0830-h-file-Weekly_review", "year", True, "h-file-Weekly-review"),
    ("0830-h-note", "day", True, "h-note"),
    ("draft", "month", True, "draft"),
    ("15-draft", "month", True, "15-draft"),
    ("15-08305-draft", "month", True, "15-08305-draft"),
    ("15-0830", "month", True, ""),
])
def test_strip_date_tokens(stem, granularity, parse_time, expected):
    assert date_mapper.strip_date_tokens(stem, granularity, parse_time) == expected

import hashlib
from datetime import datetime, timezone

import pytest
from dateutil import tz

from datelayout import utils


def test_parse_date_iso():
    dt = utils.parse_date("2020-01-02 03:04:05")
    assert dt == datetime(2020, 1, 2, 3, 4, 5)


def test_parse_date_without_padding():
    assert utils.parse_date("2024-3-1") == datetime(2024, 3, 1)


@pytest.mark.parametrize("s", [
    "notadate",
    "",
    None,
    "15",
    "732",
])
def test_parse_invalid_dates(s):
    assert utils.parse_date(s) is None


def test_naive_dates_take_the_given_timezone():
    zone = tz.gettz("Europe/Berlin")
    dt = utils.parse_date("2024-07-01", tz=zone)
    assert dt.tzinfo is zone
    assert dt.astimezone(timezone.utc) == datetime(2024, 6, 30, 22, 0, tzinfo=timezone.utc)


def test_explicit_offsets_are_kept():
    dt = utils.parse_date("2025-11-15T03:46:40+13:00", tz=tz.gettz("Etc/UTC"))
    assert dt.utcoffset().total_seconds() == 13 * 3600


def test_parse_falls_back_to_dateutil():
    examples = [
        ("2025-11-15T03:46:40Z", 2025),
        ("March 3, 2023", 2023),
        ("15 Nov 2025 03:46", 2025),
    ]
    for s, yr in examples:
        dt = utils.parse_date(s)
        assert dt is not None and dt.year == yr


def test_file_hash(tmp_path):
    path = tmp_path / "a.md"
    path.write_bytes(b"hello")
    expected = hashlib.sha256(b"hello").hexdigest()
    assert utils.file_hash(path) == expected[:utils.HASH_LENGTH]
    assert utils.file_hash(path, length=12) == expected[:12]


def test_file_hash_depends_on_content(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_text("one")
    b.write_text("two")
    assert utils.file_hash(a) != utils.file_hash(b)

"""Build output paths and move files into the date layout.

Filenames are composed from ordered tokens::

    [date] [time] hash type [subject]

joined with ``-``. The date token depends on the output structure (see
:mod:`datelayout.structure`), so with ``month`` a note written on
2024-03-15 08:30 ends up as ``2024/3/15-0830-<hash>-<type>-<subject>``.
"""
import re
import shutil
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from . import date_mapper, utils
from .structure import Granularity, date_token, directory_segments, time_token

SEPARATOR = "-"
UNTITLED = "untitled"

_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9._-]")
_RUN_RE = re.compile(r"[-_]+")


def sanitize_subject(subject: str) -> str:
    """Make ``subject`` safe to use as the last filename token.

    Disallowed characters become ``_``, runs of ``-``/``_`` collapse to a
    single ``_`` and leading/trailing ones are stripped. An empty result
    becomes ``untitled``.
    """
    s = _DISALLOWED_RE.sub("_", subject or "")
    s = _RUN_RE.sub("_", s)
    s = s.strip("_")
    return s or UNTITLED


def construct_filename(
    date: datetime,
    type_: str,
    hash_: str,
    subject: Optional[str] = None,
    *,
    structure: Granularity,
    filename_options: Iterable[str],
    tz: Optional[tzinfo] = None,
) -> str:
    """Return the filename (without extension) for a file.

    Raises:
        ConfigurationError: when ``date`` is requested with the ``day``
            structure.
    """
    options = set(filename_options)
    parts: List[str] = []
    if "date" in options:
        parts.append(date_token(date, structure, tz))
    if "time" in options:
        parts.append(time_token(date, tz))
    parts.append(hash_)
    parts.append(type_)
    if subject:
        parts.append(sanitize_subject(subject))
    return SEPARATOR.join(parts)


def output_directory_for(
    date: datetime,
    output_directory: Path,
    structure: Granularity,
    tz: Optional[tzinfo] = None,
) -> Path:
    return Path(output_directory).joinpath(*directory_segments(date, structure, tz))


def construct_output_directory(
    date: datetime,
    output_directory: Path,
    structure: Granularity,
    tz: Optional[tzinfo] = None,
) -> Path:
    """Return the directory for ``date`` and create it if needed."""
    path = output_directory_for(date, output_directory, structure, tz)
    path.mkdir(parents=True, exist_ok=True)
    return path


def unique_path(directory: Path, filename: str) -> Path:
    """Return ``directory / filename``, adding ``_1``, ``_2``... if taken."""
    dest = Path(directory) / filename
    if not dest.exists():
        return dest
    stem, suffix = dest.stem, dest.suffix
    i = 1
    while True:
        candidate = dest.with_name(f"{stem}_{i}{suffix}")
        if not candidate.exists():
            return candidate
        i += 1


def file_date(path: Path, date: Optional[datetime]) -> datetime:
    """Return ``date`` or, when there is none, the file's modification time."""
    if date is not None:
        return date
    return datetime.fromtimestamp(Path(path).stat().st_mtime, tz=timezone.utc)


def organize_file(
    operator,
    path: Path,
    date: Optional[datetime],
    type_: str = "file",
    dry_run: bool = False,
    copy: bool = False,
) -> Tuple[Path, Path]:
    """Move or copy one input file to its place in the output layout.

    Returns:
        The tuple ``(src, dst)``. With ``dry_run`` nothing is created and
        ``dst`` is the path the file would get before collision handling.
    """
    when = file_date(path, date)
    subject = path.stem
    if date is not None:
        # the old date tokens are already encoded by the new layout
        subject = date_mapper.strip_date_tokens(
            subject, operator.config.input_structure, operator.config.parse_time
        ) or None
    name = operator.construct_filename(
        when, type_, utils.file_hash(path), subject=subject
    ) + path.suffix
    if dry_run:
        dst = output_directory_for(
            when, operator.config.output_directory,
            operator.output_structure, operator.config.tzinfo,
        ) / name
        print(f"DRY RUN: would {'copy' if copy else 'move'} {path} -> {dst}")
        return path, dst
    dst = unique_path(operator.construct_output_directory(when), name)
    if copy:
        shutil.copy2(str(path), str(dst))
    else:
        shutil.move(str(path), str(dst))
    operator.logger.debug("%s %s -> %s", "Copied" if copy else "Moved", path, dst)
    return path, dst


def organize_tree(
    operator,
    type_: str = "file",
    dry_run: bool = False,
    copy: bool = False,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Tuple[Path, Path]]:
    """Move every input file into the output layout.

    Args:
        operator: A :class:`datelayout.operate.Operator`.
        type_: Type token written into each filename.
        dry_run: Only print the planned moves.
        copy: Copy instead of moving.
        start: Passed on to ``operator.process``.
        end: Passed on to ``operator.process``.

    Returns:
        A list of tuples ``(src, dst)`` of planned/made moves.
    """
    moves: List[Tuple[Path, Path]] = []

    def _organize(path: Path, date: Optional[datetime]):
        moves.append(organize_file(operator, path, date, type_, dry_run=dry_run, copy=copy))

    operator.process(_organize, start=start, end=end)
    return moves

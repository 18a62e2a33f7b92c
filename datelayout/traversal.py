"""Enumerate input files and hand them to a callback.

The traversal lists files below the input directory with a glob pattern
derived from the ``recursive`` flag and the extension allow-list. In
structured mode it recovers each file's date from its path, drops files
outside the date range and calls the callback with ``(path, date)``; in
unstructured mode every match is passed on with ``date=None``.

Problems with a single file are logged and skipped. Problems with the
configuration raise :class:`~datelayout.errors.ConfigurationError`
before any file is touched.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from . import date_mapper
from .config import Config
from .date_range import DateRange, describe_range, is_in_range, resolve_range
from .errors import ConfigurationError
from .structure import Granularity

Callback = Callable[[Path, Optional[datetime]], None]

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def file_pattern(recursive: bool, extensions: Sequence[str]) -> str:
    """Return the glob pattern for the given flags.

    Examples:
        ``file_pattern(False, ['md'])`` -> ``'*.md'``
        ``file_pattern(True, ['md', 'txt'])`` -> ``'**/*.{md,txt}'``
        ``file_pattern(True, [])`` -> ``'**/*'``
    """
    prefix = "**/" if recursive else ""
    if extensions:
        if len(extensions) == 1:
            return f"{prefix}*.{extensions[0]}"
        return f"{prefix}*.{{{','.join(extensions)}}}"
    if recursive:
        return "**/*"
    return "*.*"


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives into separate glob patterns."""
    m = _BRACE_RE.search(pattern)
    if not m:
        return [pattern]
    head, tail = pattern[:m.start()], pattern[m.end():]
    expanded: List[str] = []
    for alt in m.group(1).split(","):
        for p in expand_braces(f"{head}{alt}{tail}"):
            if p not in expanded:
                expanded.append(p)
    return expanded


def list_files(root: Path, pattern: str) -> List[Path]:
    """Return the files below ``root`` matching ``pattern``, sorted.

    Directories are skipped. Filesystem errors are not caught.
    """
    root = Path(root)
    seen = set()
    matches: List[Path] = []
    for p in expand_braces(pattern):
        for path in root.glob(p):
            if path in seen or not path.is_file():
                continue
            seen.add(path)
            matches.append(path)
    return sorted(matches)


class Traversal:
    """Walk ``config.input_directory`` and drive a per-file callback.

    Args:
        config: Resolved configuration.
        logger: Logger to report progress and per-file problems to.
        structured: Recover dates from paths (``structured-input``).
        use_extensions: Apply ``config.extensions`` to the pattern.
    """

    def __init__(
        self,
        config: Config,
        logger: Optional[logging.Logger] = None,
        structured: bool = True,
        use_extensions: bool = True,
    ):
        self.config = config
        self.logger = logger or logging.getLogger("datelayout")
        self.structured = structured
        self.use_extensions = use_extensions

    @property
    def extensions(self) -> Sequence[str]:
        return self.config.extensions if self.use_extensions else ()

    @property
    def recursive(self) -> bool:
        # year/month/day inputs keep their files in dated subdirectories
        if self.structured and self.config.input_structure != Granularity.NONE:
            return True
        return self.config.recursive

    def pattern(self) -> str:
        pattern = file_pattern(self.recursive, self.extensions)
        if self.extensions:
            self.logger.debug("Applying extension filter: %s", ",".join(self.extensions))
        return pattern

    def date_range(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> DateRange:
        """Return the range for a structured run.

        Explicit bounds win over ``config.date_range``; with no bounds
        at all the default 31-day window is used.
        """
        if start is None and end is None and self.config.date_range is not None:
            start, end = self.config.date_range.start, self.config.date_range.end
        return resolve_range(start, end, now=now)

    def resolve(self, path: Path) -> Optional[datetime]:
        relative = path.relative_to(self.config.input_directory)
        return date_mapper.date_from_path(
            relative,
            self.config.input_structure,
            self.config.parse_time,
            tz=self.config.tzinfo,
        )

    def _call(self, callback: Callback, path: Path, date: Optional[datetime]) -> bool:
        try:
            callback(path, date)
        except Exception as e:
            self.logger.error("Error processing file %s: %s", path, e, exc_info=True)
            return False
        return True

    def process(
        self,
        callback: Callback,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Call ``callback(path, date)`` for every matching file.

        Returns:
            The number of files the callback handled without raising.

        Raises:
            ConfigurationError: for a date range in unstructured mode or
                a start date after the end date.
        """
        input_directory = self.config.input_directory
        if self.structured:
            date_range = self.date_range(start, end, now=now)
            self.logger.info(
                'Processing structured input with structure "%s" in %s for date range: %s',
                self.config.input_structure.value, input_directory, describe_range(date_range),
            )
            if self.config.parse_time:
                self.logger.debug("Filename time parsing enabled based on input filename options.")
            else:
                self.logger.debug("Filename time parsing disabled; defaulting times to 00:00.")
        else:
            if start is not None or end is not None or self.config.date_range is not None:
                raise ConfigurationError(
                    "Start or end date is not allowed for unstructured input", option="--start"
                )
            date_range = None

        pattern = self.pattern()
        self.logger.info(
            "Processing %s files %s in %s with pattern %s",
            "structured" if self.structured else "unstructured",
            "recursively" if self.recursive else "non-recursively",
            input_directory, pattern,
        )

        count = 0
        for path in list_files(input_directory, pattern):
            if not self.structured:
                self.logger.debug("Processing file %s", path)
                if self._call(callback, path, None):
                    count += 1
                continue

            date = self.resolve(path)
            if date is None:
                self.logger.warning(
                    'Could not parse date for file %s with structure "%s"',
                    path, self.config.input_structure.value,
                )
                continue
            if not is_in_range(date, date_range):
                self.logger.debug(
                    "Skipping file %s, date %s out of range %s",
                    path, date.isoformat(), describe_range(date_range),
                )
                continue
            self.logger.debug("Processing file %s with date %s", path, date.isoformat())
            if self._call(callback, path, date):
                count += 1

        self.logger.info("Processed %d files matching criteria.", count)
        return count

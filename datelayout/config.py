"""Configuration for a ``datelayout`` run.

Values come from three layers: the command line, an optional INI file
and the built-in defaults. :func:`build_config` merges and validates
them once and returns an immutable :class:`Config`; the traversal and
output helpers never look at the raw layers.

Config file example::

    [datelayout]
    timezone = America/New_York
    input_directory = ~/notes/inbox
    output_directory = ~/notes/archive
    output_structure = month
    output_filename_options = date time subject
    extensions = md txt
"""

import configparser
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from dateutil import tz

from .date_range import DateRange, validate_range
from .errors import ConfigurationError
from .structure import FORMATS, Granularity
from .utils import parse_date

CONFIG_SECTION = "datelayout"

DEFAULT_TIMEZONE = "Etc/UTC"
DEFAULT_RECURSIVE = False
DEFAULT_INPUT_DIRECTORY = "./"
DEFAULT_OUTPUT_DIRECTORY = "./"
DEFAULT_INPUT_STRUCTURE = Granularity.MONTH
DEFAULT_OUTPUT_STRUCTURE = Granularity.MONTH
DEFAULT_INPUT_FILENAME_OPTIONS = ("date", "subject")
DEFAULT_OUTPUT_FILENAME_OPTIONS = ("date", "subject")
DEFAULT_EXTENSIONS = ("md",)

ALLOWED_FILENAME_OPTIONS = ("date", "time", "subject")

DEFAULTS: Dict[str, Any] = {
    "timezone": DEFAULT_TIMEZONE,
    "recursive": DEFAULT_RECURSIVE,
    "input_directory": DEFAULT_INPUT_DIRECTORY,
    "output_directory": DEFAULT_OUTPUT_DIRECTORY,
    "input_structure": DEFAULT_INPUT_STRUCTURE,
    "output_structure": DEFAULT_OUTPUT_STRUCTURE,
    "input_filename_options": DEFAULT_INPUT_FILENAME_OPTIONS,
    "output_filename_options": DEFAULT_OUTPUT_FILENAME_OPTIONS,
    "extensions": DEFAULT_EXTENSIONS,
    "start": None,
    "end": None,
}

_LIST_KEYS = ("input_filename_options", "output_filename_options", "extensions")


@dataclass(frozen=True)
class Config:
    timezone: str
    recursive: bool
    input_directory: Path
    output_directory: Path
    input_structure: Granularity
    output_structure: Granularity
    input_filename_options: Tuple[str, ...]
    output_filename_options: Tuple[str, ...]
    extensions: Tuple[str, ...]
    date_range: Optional[DateRange] = None

    @property
    def tzinfo(self) -> tzinfo:
        return tz.gettz(self.timezone)

    @property
    def parse_time(self) -> bool:
        """True when input filenames carry an ``HHmm`` token."""
        return "time" in self.input_filename_options


def load_config_file(path) -> Dict[str, Any]:
    """Read the ``[datelayout]`` section of an INI file.

    List values (filename options, extensions) are space separated.
    Only keys present in the file are returned.

    Raises:
        ConfigurationError: if the file or the section is missing, or a
            key is unknown.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}", option="--config")

    parser = configparser.ConfigParser()
    try:
        parser.read(path, encoding="utf-8")
    except configparser.Error as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}", option="--config") from e
    if not parser.has_section(CONFIG_SECTION):
        raise ConfigurationError(
            f"Section [{CONFIG_SECTION}] not found in {path}", option="--config"
        )

    values: Dict[str, Any] = {}
    for key, raw in parser.items(CONFIG_SECTION):
        if key not in DEFAULTS:
            raise ConfigurationError(f"Unknown key '{key}' in {path}", option="--config")
        if key == "recursive":
            try:
                values[key] = parser.getboolean(CONFIG_SECTION, key)
            except ValueError as e:
                raise ConfigurationError(str(e), option="--config") from e
        elif key in _LIST_KEYS:
            values[key] = raw.split()
        else:
            values[key] = raw.strip()
    return values


def merge_layers(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return the first non-``None`` value per key, falling back to defaults."""
    merged = dict(DEFAULTS)
    for key in DEFAULTS:
        for layer in layers:
            if layer is None:
                continue
            value = layer.get(key)
            if value is not None:
                merged[key] = value
                break
    return merged


def validate_timezone(name: str) -> str:
    if not name or tz.gettz(name) is None:
        raise ConfigurationError(f"Invalid timezone: {name}", option="--timezone")
    return name


def validate_filename_options(
    options: Iterable[str],
    structure: Granularity,
    option: str,
) -> Tuple[str, ...]:
    if isinstance(options, str):
        options = options.split()
    options = list(options)
    if options and "," in options[0]:
        raise ConfigurationError(
            "Filename options should be space-separated, not comma-separated. "
            f"Example: {option} date time subject",
            option=option,
        )
    if len(options) == 1 and len(options[0].split()) > 1:
        raise ConfigurationError(
            f'Filename options should not be quoted. Use: {option} date time subject '
            f'instead of {option} "date time subject"',
            option=option,
        )
    invalid = [o for o in options if o not in ALLOWED_FILENAME_OPTIONS]
    if invalid:
        raise ConfigurationError(
            f"Invalid filename options: {', '.join(invalid)}. "
            f"Valid options are: {', '.join(ALLOWED_FILENAME_OPTIONS)}",
            option=option,
        )
    if "date" in options and not FORMATS[structure].filename_fields:
        raise ConfigurationError(
            f'Cannot use date in filename when structure is "{structure.value}"',
            option=option,
        )
    return tuple(dict.fromkeys(options))


def validate_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(extensions, str):
        extensions = extensions.split()
    cleaned = []
    for ext in extensions:
        ext = ext.strip().lstrip(".")
        if not ext or any(c in ext for c in "/\\{},*?["):
            raise ConfigurationError(f"Invalid extension: {ext!r}", option="--extensions")
        if ext not in cleaned:
            cleaned.append(ext)
    return tuple(cleaned)


def validate_input_directory(directory) -> Path:
    path = Path(directory).expanduser()
    if not path.is_dir() or not os.access(path, os.R_OK):
        raise ConfigurationError(
            f"Input directory does not exist or is not readable: {directory}",
            option="--input-directory",
        )
    return path


def validate_output_directory(directory) -> Path:
    path = Path(directory).expanduser()
    if not path.is_dir() or not os.access(path, os.W_OK):
        raise ConfigurationError(
            f"Output directory does not exist or is not writable: {directory}",
            option="--output-directory",
        )
    return path


def _parse_bound(value, zone: tzinfo, option: str):
    if value is None or value == "":
        return None
    if hasattr(value, "year"):
        return value if value.tzinfo is not None else value.replace(tzinfo=zone)
    dt = parse_date(str(value), tz=zone)
    if dt is None:
        raise ConfigurationError(f"Invalid date: {value}", option=option)
    return dt


def build_config(
    args: Optional[Mapping[str, Any]] = None,
    file_values: Optional[Mapping[str, Any]] = None,
    check_input: bool = True,
    check_output: bool = True,
) -> Config:
    """Merge the configuration layers and validate the result.

    Args:
        args: Values from the command line; ``None`` means "not given".
        file_values: Values from :func:`load_config_file`.
        check_input: Require the input directory to exist.
        check_output: Require the output directory to exist and be
            writable.

    Raises:
        ConfigurationError: on the first invalid value.
    """
    values = merge_layers(args, file_values)

    timezone_name = validate_timezone(str(values["timezone"]))
    zone = tz.gettz(timezone_name)

    input_structure = Granularity.parse(values["input_structure"], option="--input-structure")
    output_structure = Granularity.parse(values["output_structure"], option="--output-structure")

    input_options = validate_filename_options(
        values["input_filename_options"], input_structure, "--input-filename-options"
    )
    output_options = validate_filename_options(
        values["output_filename_options"], output_structure, "--output-filename-options"
    )
    extensions = validate_extensions(values["extensions"])

    input_directory = Path(values["input_directory"]).expanduser()
    if check_input:
        input_directory = validate_input_directory(input_directory)
    output_directory = Path(values["output_directory"]).expanduser()
    if check_output:
        output_directory = validate_output_directory(output_directory)

    start = _parse_bound(values["start"], zone, "--start")
    end = _parse_bound(values["end"], zone, "--end")
    date_range = None
    if start is not None or end is not None:
        date_range = DateRange(start=start, end=end)
        validate_range(date_range)

    return Config(
        timezone=timezone_name,
        recursive=bool(values["recursive"]),
        input_directory=input_directory,
        output_directory=output_directory,
        input_structure=input_structure,
        output_structure=output_structure,
        input_filename_options=input_options,
        output_filename_options=output_options,
        extensions=extensions,
        date_range=date_range,
    )

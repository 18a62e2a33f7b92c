"""Command-line interface for the ``datelayout`` package.

This module exposes the CLI entrypoint used by the console script
``datelayout``. It is a thin adapter from parsed arguments to
:func:`datelayout.config.build_config`, :class:`datelayout.operate.Operator`
and :func:`datelayout.organize.organize_tree`, so tests can exercise the
logic without spawning subprocesses.
"""
import argparse
import sys
from importlib.metadata import version

from . import config as config_mod
from . import operate
from . import organize as organize_mod
from .errors import ConfigurationError
from .log import configure_logging

__version__ = version("datelayout")


def _config_from_args(args, check_output=True):
    """Merge command line values with the optional config file."""
    file_values = None
    if getattr(args, "config", None):
        file_values = config_mod.load_config_file(args.config)
    values = {key: getattr(args, key, None) for key in config_mod.DEFAULTS}
    return config_mod.build_config(values, file_values, check_output=check_output)


def _features(args):
    features = set(operate.ALL_FEATURES)
    if getattr(args, "unstructured", False):
        features.discard(operate.STRUCTURED_INPUT)
    return features


def cmd_organize(args):
    """Handle the `organize` subcommand."""
    config = _config_from_args(args, check_output=not args.dry_run)
    operator = operate.Operator(config, features=_features(args), logger=args.logger)
    moves = organize_mod.organize_tree(
        operator,
        type_=args.type,
        dry_run=args.dry_run,
        copy=args.copy,
    )
    print(f"Organized {len(moves)} files")


def cmd_list(args):
    """Handle the `list` subcommand: print each file with its date."""
    config = _config_from_args(args, check_output=False)
    features = _features(args) - {operate.OUTPUT}
    operator = operate.Operator(config, features=features, logger=args.logger)

    def _print(path, date):
        if date is None:
            print(path)
        else:
            print(f"{path}\t{date.isoformat()}")

    count = operator.process(_print)
    print(f"Found {count} file(s).")


def _add_layout_args(p):
    p.add_argument("--config", help="INI file with a [datelayout] section providing defaults")
    p.add_argument(
        "--timezone",
        help=f"IANA timezone for date calculations (default: {config_mod.DEFAULT_TIMEZONE})",
    )
    p.add_argument(
        "-r", "--recursive",
        action="store_true",
        default=None,
        help="Process all files below the input directory, not only its top level",
    )
    p.add_argument(
        "-i", "--input-directory",
        help=f"Input directory (default: {config_mod.DEFAULT_INPUT_DIRECTORY})",
    )
    p.add_argument(
        "-o", "--output-directory",
        help=f"Output directory (default: {config_mod.DEFAULT_OUTPUT_DIRECTORY})",
    )
    p.add_argument(
        "--input-structure",
        help="Directory structure of the input tree: none/year/month/day (default: month)",
    )
    p.add_argument(
        "--input-filename-options",
        nargs="+",
        help="Tokens present in input filenames, space separated: date time subject (default: date subject)",
    )
    p.add_argument(
        "--output-structure",
        help="Directory structure of the output tree: none/year/month/day (default: month)",
    )
    p.add_argument(
        "--output-filename-options",
        nargs="+",
        help=(
            "Tokens written into output filenames, space separated: date time subject "
            "(default: date subject). 'date' cannot be combined with the 'day' structure."
        ),
    )
    p.add_argument(
        "--extensions",
        nargs="*",
        help="File extensions to process, space separated without dots (default: md). Pass none to match all files.",
    )
    p.add_argument("--start", help="Only process files dated on or after this date (YYYY-M-D)")
    p.add_argument(
        "--end",
        help="Only process files dated before this date (YYYY-M-D). Without --start/--end the last 31 days are used.",
    )
    p.add_argument(
        "--unstructured",
        action="store_true",
        help="Do not read dates from input paths; date filters are not allowed",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug output")


def main():
    parser = argparse.ArgumentParser(
        prog="datelayout",
        description="Organize files into a date-keyed directory layout.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__
    )
    sub = parser.add_subparsers(dest="cmd")

    ##########################################
    # -------- subcommand: organize -------- #
    ##########################################
    p_org = sub.add_parser("organize", help="Move files from the input tree into the output layout.")
    _add_layout_args(p_org)
    p_org.add_argument("--type", default="file", help="Type token written into each filename (default: file)")
    p_org.add_argument("--copy", action="store_true", help="Copy files instead of moving them")
    p_org.add_argument("--dry-run", action="store_true", help="Do not move files; only print actions")
    p_org.set_defaults(func=cmd_organize)

    ######################################
    # -------- subcommand: list -------- #
    ######################################
    p_list = sub.add_parser("list", help="List input files with the dates read from their paths.")
    _add_layout_args(p_list)
    p_list.set_defaults(func=cmd_list)

    ###########################################

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.logger = configure_logging(verbose=args.verbose)
    try:
        args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(2)

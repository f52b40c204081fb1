"""Argument parsing functionality for bundlecost."""

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from constants import Constants

USAGE_EPILOG = """\
Everything after a literal -- is passed verbatim to the minifier and replaces
its default arguments (--compress --mangle).

examples:
  bundlecost lodash
  bundlecost react@16.14.0 react-dom@16.14.0
  bundlecost ./src/index.js events -g 9
  bundlecost moment -- --compress --mangle --toplevel
"""


def split_minifier_args(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split argv at the first literal ``--`` into (own args, minifier args)."""
    argv = list(argv)
    if "--" not in argv:
        return argv, []
    idx = argv.index("--")
    return argv[:idx], argv[idx + 1:]


def _gzip_level(value: str) -> int:
    try:
        level = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid gzip level: {value!r}") from e
    if level not in Constants.GZIP_LEVELS:
        raise argparse.ArgumentTypeError(f"gzip level must be between -1 and 9, got {level}")
    return level


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser (without the minifier pass-through)."""
    parser = argparse.ArgumentParser(
        prog="bundlecost",
        description=(
            "bundlecost - estimate the bundled, minified and gzipped size "
            "of npm packages, local files and builtins"
        ),
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=True,
    )

    parser.add_argument("modules",
                        metavar="MODULE",
                        help="Module to weigh: name, name@version, ./relative/file or a builtin",
                        nargs="+")
    parser.add_argument("-g", "--gzip-level",
                        dest="GZIP_LEVEL",
                        help="Gzip compression level (default: codec default)",
                        action="store",
                        type=_gzip_level)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Directory packages are installed into and reused from",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program.

    Options may appear anywhere among the module names.

    The namespace carries ``MINIFIER_ARGS`` (possibly empty) taken from
    everything after ``--``.
    """
    if argv is None:
        argv = sys.argv[1:]
    own, minifier_args = split_minifier_args(argv)
    args = build_parser().parse_intermixed_args(own)
    args.modules = [m for m in args.modules if m]
    args.MINIFIER_ARGS = minifier_args
    return args

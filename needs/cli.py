"""
needs - check if given binaries are available in the PATH and get their versions.

Usage:
    needs git cargo node       # check the given binaries
    needs                      # read names from ./needsfile (or .needsfile, needs, .needs)
    needs -q git               # no output, exit 0 if everything was found
    needs -n git               # skip version retrieval
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Sequence

from . import __version__
from .config import load_config
from .discovery import discover
from .errors import ConfigError, NeedsError
from .events import log_event
from .logging_config import get_logger, level_for_verbosity, setup_logging
from .needsfile import get_binary_names
from .render import render_json, render_results

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="needs",
        description="Check if given bin(s) are available in the PATH",
        epilog=(
            "If no binaries are specified, it will look for a file named "
            "`needsfile` or `.needsfile` in the current directory."
        ),
    )
    parser.add_argument(
        "bins",
        nargs="*",
        help="List of binaries to check",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Stay quiet, exit with 0 or 1",
    )
    parser.add_argument(
        "-v", "--verbosity",
        action="count",
        default=0,
        help="Verbosity level (can be repeated, e.g. -vvv)",
    )
    parser.add_argument(
        "-n", "--no-versions",
        action="store_true",
        help="Don't check for versions",
    )
    parser.add_argument(
        "-f", "--full-versions",
        action="store_true",
        help="Show the full version string",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to a configuration file",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        metavar="SECONDS",
        help="Timeout for each version flag probe",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write debug logs to PATH",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"needs {__version__}",
    )
    return parser


def _report(error: NeedsError) -> None:
    logger = get_logger()
    logger.error(f"{error.message} [{error.code}]")
    if error.help:
        logger.error(f"help: {error.help}")


def _run(args: argparse.Namespace) -> int:
    # Keep stdout parseable when it carries JSON
    setup_logging(
        level=level_for_verbosity(args.verbosity),
        log_file=args.log_file,
        quiet=args.quiet,
        stream=sys.stderr if args.json else sys.stdout,
    )
    logger = get_logger()
    logger.debug(f"Starting needs with verbosity level {args.verbosity}")

    try:
        config = load_config(args.config, verbose=args.verbosity >= 3)
        overrides = {}
        if args.no_versions:
            overrides["no_versions"] = True
        if args.full_versions:
            overrides["full_versions"] = True
        if args.timeout is not None:
            overrides["timeout_seconds"] = args.timeout
        if overrides:
            config = replace(config, **overrides)
    except ConfigError as e:
        _report(e)
        return EXIT_CONFIG
    except ValueError as e:
        _report(ConfigError(str(e)))
        return EXIT_CONFIG

    try:
        names = get_binary_names(args.bins)
        if args.quiet:
            records = discover(names, replace(config, no_versions=True), observer=log_event)
        else:
            records = discover(names, config, observer=log_event)
    except NeedsError as e:
        _report(e)
        return EXIT_FAILURE

    if args.quiet:
        missing = [r.name for r in records if not r.found]
        if missing:
            logger.info(f"quiet exit, not found: {missing}")
            return EXIT_FAILURE
        logger.info("quiet exit, all found")
        return EXIT_OK

    if args.json:
        render_json(records)
    else:
        render_results(
            records,
            show_versions=not config.no_versions,
            full_versions=config.full_versions,
        )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    try:
        return _run(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())

"""Command-line interface for depscope."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from depscope import __version__
from depscope.errors import ConfigError
from depscope.pipeline import run
from depscope.writers import FORMATS

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="depscope",
        description="Extract and attribute external-library imports in Java and JS/TS repositories.",
    )
    parser.add_argument(
        "repo_path",
        type=Path,
        help="Path to the repository to analyze",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: extracted-imports.json)",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        dest="fmt",
        help="Output format (default: from the output suffix, else json)",
    )
    parser.add_argument(
        "--with-resolution",
        action="store_true",
        help="Add a resolution column (index, heuristic or unresolved)",
    )
    parser.add_argument(
        "--jdeps-release",
        type=int,
        default=None,
        help="Release passed to jdeps --multi-release (default: 17)",
    )
    parser.add_argument(
        "--no-java-tools",
        action="store_false",
        dest="java_tools",
        default=None,
        help="Do not run mvn/jdeps; attribute Java imports heuristically",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("depscope").setLevel(logging.DEBUG)

    try:
        run(
            args.repo_path,
            output=args.output,
            fmt=args.fmt,
            with_resolution=args.with_resolution,
            jdeps_release=args.jdeps_release,
            java_tools=args.java_tools,
        )
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

"""Command-line entry point for the resource minifier."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import (
    DEFAULT_FILENAME_PATTERN,
    DEFAULT_OUTPUT_DIR,
    PATTERN_ENV_VAR,
    build_config,
)
from .errors import ResminError
from .minifiers import default_minifiers, identity_minifiers
from .pipeline import run_pipeline

logger = logging.getLogger("resmin.cli")


def _split_names(values: Iterable[str]) -> List[str]:
    names: List[str] = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Minify CSS, JS and HTML resources into a mirrored tree, renaming assets "
            "with content hashes and rewriting HTML references to them."
        ),
    )
    parser.add_argument("source", type=Path, help="Directory holding the web resources")
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        type=Path,
        help="Directory where minified resources should be written",
    )
    parser.add_argument(
        "--pattern",
        default=None,
        help=(
            "Filename pattern for minified assets using [name], [ext], [hash] or "
            f"[hash:N] (default: ${PATTERN_ENV_VAR} or {DEFAULT_FILENAME_PATTERN})"
        ),
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="NAME",
        help="Basename to leave out of the output; repeat or comma-separate",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of threads used to minify resources",
    )
    parser.add_argument(
        "--no-minify",
        action="store_true",
        help="Copy content unchanged while still renaming assets and rewriting HTML",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log errors",
    )
    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def run(args: argparse.Namespace) -> int:
    _configure_logging(args)
    pattern = args.pattern or os.getenv(PATTERN_ENV_VAR) or DEFAULT_FILENAME_PATTERN

    overall_start = time.perf_counter()
    try:
        config = build_config(
            args.source,
            args.output,
            filename_pattern=pattern,
            exclude_resources=_split_names(args.exclude),
            workers=args.workers,
        )
        minifiers = identity_minifiers() if args.no_minify else default_minifiers()
        result = run_pipeline(config, minifiers)
    except ResminError as exc:
        logger.error("%s", exc)
        return 1
    total_elapsed = time.perf_counter() - overall_start

    logger.info(
        "Finished in %.2fs (%d assets, %d pages, %d skipped)",
        total_elapsed,
        len(result.assets),
        len(result.pages),
        result.skipped,
    )
    if args.verbose:
        for original, minted in sorted(result.registry.items()):
            logger.debug("%s -> %s", original, minted)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()

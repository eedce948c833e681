"""Command-line interface for DOI discovery.

Entry point: ``doi-discovery`` (configured in ``pyproject.toml``).

Usage:
    doi-discovery --file refs.txt [options]   # read references from a file
    pbpaste | doi-discovery [options]         # read references from stdin

Key options:
    --mailto, --indices/--no-indices, --delay, --details,
    --verbose/--no-verbose, --log-file.

Progress and per-reference outcomes go to stderr; the copy text (one line
per reference) goes to stdout so it can be piped straight to a clipboard
tool.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from doi_discovery.log import setup_logging
from doi_discovery.models import _DEFAULT_DELAY_S, Config
from doi_discovery.orchestrator import ResolutionSession
from doi_discovery.renderer import render_heading, render_result

logger = logging.getLogger(__name__)


def _non_negative_float(value: str) -> float:
    parsed = float(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Parse CLI arguments, read the references, and resolve them."""
    load_dotenv()

    parser = _build_parser()
    args = parser.parse_args()

    # Configure logging before any other output
    log_file = Path(args.log_file) if args.log_file else None
    setup_logging(verbose=args.verbose, log_file=log_file)

    config = Config(
        mailto=args.mailto or None,
        delay_s=args.delay,
        include_indices=args.indices,
        verbose=args.verbose,
    )

    text = _read_input(args.file)
    _run(text, config, show_details=args.details)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


def _read_input(file_arg: str | None) -> str:
    """Return the raw reference text from ``file_arg`` or stdin."""
    if file_arg is None or file_arg == "-":
        return sys.stdin.read()

    path = Path(file_arg)
    if not path.exists():
        logger.error("File not found: %s", path)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def _run(text: str, config: Config, show_details: bool = False) -> None:
    """Resolve every reference in ``text`` and print the copy text to stdout."""
    if config.mailto:
        logger.info("Using Crossref polite pool as %s", config.mailto)

    session = ResolutionSession(config)
    session.input_text = text
    results = session.resolve()
    if not results:
        logger.warning("No [n]-labelled references found in input")
        return

    logger.info("Done: %s", render_heading(results))

    if show_details:
        for result in results:
            print(render_result(result), file=sys.stderr)

    print(session.copy_text())


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doi-discovery",
        description=(
            "Resolve numbered references ([1], [2], ...) to DOIs using the "
            "Crossref API. Reads from --file or stdin."
        ),
    )

    parser.add_argument(
        "--file",
        metavar="PATH",
        default=None,
        help="Text file containing the references (default: read stdin; '-' also reads stdin).",
    )
    _default_mailto = os.environ.get("CROSSREF_MAILTO") or None
    parser.add_argument(
        "--mailto",
        metavar="EMAIL",
        default=_default_mailto,
        help=(
            "Contact address for the Crossref polite pool "
            f"(default: CROSSREF_MAILTO env var, currently {_default_mailto!r})."
        ),
    )
    parser.add_argument(
        "--indices",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Prefix each output line with its reference label (default: on).",
    )
    parser.add_argument(
        "--delay",
        metavar="S",
        type=_non_negative_float,
        default=_DEFAULT_DELAY_S,
        help=f"Pause between Crossref requests in seconds (default: {_DEFAULT_DELAY_S}).",
    )
    parser.add_argument(
        "--details",
        action="store_true",
        default=False,
        help="Also print each result with its status and source text to stderr.",
    )
    parser.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Enable DEBUG-level logging (default: off).",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="Also write log output to FILE.",
    )

    return parser


if __name__ == "__main__":
    main()

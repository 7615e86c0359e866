"""Command-line interface for logstitch.

WHY: The typical use is a one-liner over a shell glob:
``logstitch -o app.log /var/log/app/app.log.*.gz``. The glob arrives in
lexicographic order; the CLI hands it to the core, which does the
ordering and streaming, and turns typed errors into exit codes.

HOW: argparse collects the output path, the input segments and the
tuning flags (defaults come from logstitch.config). Logging is
configured on stderr. stitch() runs the pipeline with a progress
observer picked for the terminal.

RULES:
- -o/--output-file is required; at least one input is required
- The output file is overwritten, never appended to
- Exit codes: 0 success, 1 pipeline or config error, 130 interrupted
- Status and errors go to stderr; stdout stays empty
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from logstitch import __version__
from logstitch.config import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_DUPLICATE_POLICY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PROGRESS,
    DUPLICATE_POLICIES,
    parse_buffer_size,
)
from logstitch.core.concat import stitch
from logstitch.errors import LogStitchError
from logstitch.progress import make_observer

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _buffer_size_arg(value: str) -> int:
    try:
        return parse_buffer_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _log_level(verbosity: int) -> int:
    """Map -v/-vv to a log level, falling back to LOGSTITCH_LOG_LEVEL."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    level = logging.getLevelName(DEFAULT_LOG_LEVEL)
    return level if isinstance(level, int) else logging.WARNING


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: one or more input segment paths
    - Required: -o/--output-file
    - Optional: --duplicates, --buffer-size, --progress/--no-progress, -v
    """
    parser = argparse.ArgumentParser(
        prog="logstitch",
        description="Decompress rotated gzip log segments (app.log.1.gz, "
                    "app.log.2.gz, ...) in numeric order into a single file.",
    )

    parser.add_argument(
        "input_files",
        nargs="+",
        metavar="INPUT",
        help="Gzip segments named <stem>.<N>.<ext>, in any order.",
    )

    parser.add_argument(
        "-o", "--output-file",
        required=True,
        help="Output file. Created or truncated on every run.",
    )

    parser.add_argument(
        "--duplicates",
        choices=DUPLICATE_POLICIES,
        default=DEFAULT_DUPLICATE_POLICY,
        help="What to do when two inputs share an ordering key: "
             "'error' aborts, 'last' keeps the last one given (default: %(default)s).",
    )

    parser.add_argument(
        "--buffer-size",
        type=_buffer_size_arg,
        default=DEFAULT_BUFFER_SIZE,
        help="Copy buffer size in bytes (default: %(default)s).",
    )

    parser.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_PROGRESS,
        help="Show per-segment progress on stderr (default: %(default)s).",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the pipeline and return the exit code.

    WHY: Returning the code instead of exiting lets tests drive the CLI
    end to end without catching SystemExit.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=_log_level(args.verbose), format=_LOG_FORMAT, stream=sys.stderr)

    observer = make_observer(args.progress, sys.stderr)
    try:
        summary = stitch(
            args.input_files,
            args.output_file,
            on_duplicate=args.duplicates,
            buffer_size=args.buffer_size,
            observer=observer,
        )
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    except LogStitchError as e:
        logger.debug("Pipeline failed", exc_info=True)
        _status("Error: {}".format(e))
        return 1

    logger.info(
        "Stitched %d segment(s), %d bytes -> %s",
        summary.segments, summary.bytes_written, args.output_file,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m logstitch`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    sys.exit(run(argv))


if __name__ == "__main__":
    main()

"""Typed exceptions raised by the ordering and concatenation pipeline.

WHY: The CLI has to turn every failure into an exit code and a message
that names the file that broke the run. Typed exceptions carry that
context (segment name, underlying cause) so callers never parse strings.

HOW: Every error derives from LogStitchError. Filename problems are also
ValueErrors because they describe bad input, not I/O. I/O failures keep
the underlying exception on ``cause`` and are raised with ``from`` so the
traceback chain is preserved.

RULES:
- MalformedFilenameError and DuplicateKeyError are raised before any I/O
- SegmentOpenError, DecompressionError and SinkIOError abort a run
- Every message includes the offending filename when there is one
"""

from __future__ import annotations

from typing import List, Optional


class LogStitchError(Exception):
    """Base class for all pipeline errors."""


class MalformedFilenameError(LogStitchError, ValueError):
    """Raised when no ordering key can be extracted from a filename.

    RULES:
    - name is the segment reference exactly as supplied by the caller
    """

    def __init__(self, name: str, reason: str = "expected <stem>.<N>.<ext>") -> None:
        self.name = name
        self.reason = reason
        super().__init__("Wrong filename format! ({}): {}".format(name, reason))


class DuplicateKeyError(LogStitchError, ValueError):
    """Raised when two or more inputs resolve to the same ordering key."""

    def __init__(self, key: int, names: List[str]) -> None:
        self.key = key
        self.names = list(names)
        super().__init__(
            "Ordering key {} is shared by {} files: {}".format(
                key, len(self.names), ", ".join(self.names)
            )
        )


class SegmentOpenError(LogStitchError):
    """Raised when a segment file cannot be opened for reading."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__("Failed to open archive file ({}): {}".format(name, cause))


class DecompressionError(LogStitchError):
    """Raised when a segment is not valid gzip data.

    Covers a bad magic number, truncated streams and CRC/length mismatches.
    The sink may already hold part of this segment's output.
    """

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__("Failed to decompress ({}): {}".format(name, cause))


class SinkIOError(LogStitchError):
    """Raised when opening, writing to or flushing the output sink fails."""

    def __init__(self, cause: BaseException, path: Optional[str] = None) -> None:
        self.cause = cause
        self.path = path
        if path is None:
            message = "Failed to write output: {}".format(cause)
        else:
            message = "Failed to write output ({}): {}".format(path, cause)
        super().__init__(message)

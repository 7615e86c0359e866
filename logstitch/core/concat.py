"""Streaming gzip decompression and concatenation into a single sink.

WHY: A rotated log is only useful as one contiguous stream. Segments can
be gigabytes once decompressed, so each one is decoded and copied in
bounded chunks instead of being loaded into memory.

HOW: decompress_into() wraps a readable stream in gzip.GzipFile and
copies fixed-size chunks to the sink. StreamConcatenator walks an
already-ordered list of segment paths, opens each one, checks the gzip
magic bytes, and calls decompress_into(). stitch() is the full pipeline:
resolve order, open the output fresh, run, close.

RULES:
- Segments are processed strictly sequentially, in the given order
- The first error aborts the run; nothing is retried or skipped
- A failed segment may leave partial output in the sink (no rollback)
- The sink is flushed before a run reports success
- The output file is always created or truncated, never appended to
- A StreamConcatenator instance runs at most once
"""

from __future__ import annotations

import enum
import gzip
import io
import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Optional, Sequence, Union

from logstitch.config import DEFAULT_BUFFER_SIZE, DEFAULT_DUPLICATE_POLICY, GZIP_MAGIC
from logstitch.core.ordering import resolve
from logstitch.errors import DecompressionError, SegmentOpenError, SinkIOError
from logstitch.progress import NullProgress, ProgressObserver

logger = logging.getLogger(__name__)

# Everything gzip.GzipFile.read() raises for bad input.
# gzip.BadGzipFile is a subclass of OSError.
_DECODE_ERRORS = (OSError, EOFError, zlib.error)


class RunState(str, enum.Enum):
    """Lifecycle of a single concatenation run.

    RULES:
    - idle: created, run() not called yet
    - processing: copying segments into the sink
    - flushed: every segment copied and the sink flushed (terminal)
    - failed: aborted on the first error (terminal)
    """

    IDLE = "idle"
    PROCESSING = "processing"
    FLUSHED = "flushed"
    FAILED = "failed"


@dataclass
class ConcatSummary:
    """Outcome of a successful run."""

    segments: int
    bytes_written: int
    state: RunState = RunState.FLUSHED


def decompress_into(
    reader: IO[bytes],
    sink: IO[bytes],
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    name: str = "<stream>",
) -> int:
    """Decompress a gzip stream into ``sink`` using a bounded buffer.

    Concatenated gzip members are decoded one after another, as
    gzip.GzipFile does by default.

    Args:
        reader: Readable binary stream positioned at the gzip header.
        sink: Writable binary stream.
        buffer_size: Maximum number of decompressed bytes held at once.
        name: Segment name used in error messages.

    Returns:
        Number of decompressed bytes written.

    Raises:
        DecompressionError: Bad header, corrupt deflate data, truncated
            stream or CRC/length mismatch.
        SinkIOError: Writing to the sink failed.
    """
    written = 0
    with gzip.GzipFile(fileobj=reader, mode="rb") as decoder:
        while True:
            try:
                chunk = decoder.read(buffer_size)
            except _DECODE_ERRORS as exc:
                raise DecompressionError(name, exc) from exc
            if not chunk:
                break
            try:
                sink.write(chunk)
            except OSError as exc:
                raise SinkIOError(exc) from exc
            written += len(chunk)
    return written


def _check_magic(reader: io.BufferedReader, name: str) -> None:
    """Reject segments that do not start with the gzip magic bytes.

    Without this, gzip.GzipFile treats a zero-byte file as an empty
    stream and the segment would silently contribute nothing. The bytes
    are peeked, not consumed, so pipes and other unseekable inputs work.
    """
    try:
        magic = reader.peek(len(GZIP_MAGIC))[: len(GZIP_MAGIC)]
    except OSError as exc:
        raise DecompressionError(name, exc) from exc
    if magic != GZIP_MAGIC:
        cause = gzip.BadGzipFile("Not a gzipped file ({!r})".format(magic))
        raise DecompressionError(name, cause)


class StreamConcatenator:
    """Copies decompressed segments, in order, into one output sink.

    WHY: Keeps the per-run state (progress, bytes written, terminal
    state) in one place and gives tests a single object to drive.

    HOW: run() moves idle -> processing -> flushed. Any exception moves
    the state to failed and propagates unchanged to the caller.

    RULES:
    - ordered_names must already be sorted (see ordering.resolve)
    - Observer is notified before each segment is opened
    - run() may only be called once per instance
    """

    def __init__(
        self,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        observer: Optional[ProgressObserver] = None,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive, got {}".format(buffer_size))
        self.buffer_size = buffer_size
        self.observer = observer if observer is not None else NullProgress()
        self.state = RunState.IDLE
        self.current_index: Optional[int] = None
        self.bytes_written = 0

    def run(self, ordered_names: Sequence[str], sink: IO[bytes]) -> ConcatSummary:
        """Decompress every segment into ``sink`` and flush it.

        Raises:
            SegmentOpenError: A segment file could not be opened.
            DecompressionError: A segment is not valid gzip data.
            SinkIOError: Writing or flushing the sink failed.
            RuntimeError: The instance has already run.
        """
        if self.state is not RunState.IDLE:
            raise RuntimeError(
                "StreamConcatenator already ran (state: {})".format(self.state.value)
            )

        total = len(ordered_names)
        self.state = RunState.PROCESSING
        try:
            for index, name in enumerate(ordered_names):
                self.current_index = index
                self.observer.on_segment_start(index, total, name)
                self.bytes_written += self._copy_segment(name, sink)

            try:
                sink.flush()
            except OSError as exc:
                raise SinkIOError(exc) from exc
        except BaseException:
            self.state = RunState.FAILED
            raise

        self.state = RunState.FLUSHED
        self.observer.on_finish()
        logger.info("Wrote %d bytes from %d segment(s)", self.bytes_written, total)
        return ConcatSummary(segments=total, bytes_written=self.bytes_written)

    def _copy_segment(self, name: str, sink: IO[bytes]) -> int:
        try:
            reader = open(name, "rb")
        except OSError as exc:
            raise SegmentOpenError(name, exc) from exc

        with reader:
            _check_magic(reader, name)
            written = decompress_into(reader, sink, self.buffer_size, name=name)

        logger.debug("Segment %s: %d bytes", name, written)
        return written


def stitch(
    inputs: Iterable[str],
    output_path: Union[str, Path],
    *,
    on_duplicate: str = DEFAULT_DUPLICATE_POLICY,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    observer: Optional[ProgressObserver] = None,
) -> ConcatSummary:
    """Order ``inputs`` and write their decompressed contents to ``output_path``.

    Ordering runs completely before the output file is touched, so a
    malformed or duplicate filename leaves any existing output intact.

    Raises:
        MalformedFilenameError, DuplicateKeyError: From ordering.
        SegmentOpenError, DecompressionError, SinkIOError: From the run.
    """
    ordered = resolve(inputs, on_duplicate=on_duplicate)
    logger.debug("Resolved order: %s", ordered)

    concatenator = StreamConcatenator(buffer_size=buffer_size, observer=observer)
    try:
        try:
            sink = open(output_path, "wb")
        except OSError as exc:
            raise SinkIOError(exc, path=str(output_path)) from exc

        try:
            with sink:
                return concatenator.run(ordered, sink)
        except OSError as exc:
            # close() failed after a successful run
            raise SinkIOError(exc, path=str(output_path)) from exc
    finally:
        concatenator.observer.close()

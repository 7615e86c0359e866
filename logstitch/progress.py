"""Progress observers notified once per processed segment.

WHY: Users stitching hundreds of segments want to see how far along the
run is, but the concatenator itself must stay testable without a
terminal. An explicit observer passed into the concatenator replaces a
shared progress bar updated from inside the processing loop.

HOW: ProgressObserver is an ABC with one required hook. TqdmProgress
draws a bar on stderr, LoggingProgress writes one log line per segment
for non-interactive runs, and NullProgress does nothing.
make_observer() picks one based on the CLI flag and whether the stream
is a TTY.

RULES:
- on_segment_start(index, total, name) is called before the segment is opened
- index is 0-based; total is the number of segments in the run
- on_finish() is called only after a successful flush
- Observers are informational; they never affect the output bytes
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import IO, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)

_BAR_FORMAT = "[{elapsed}] {bar:40} {n_fmt:>7}/{total_fmt:7} {desc}"


class ProgressObserver(ABC):
    """Receives per-segment progress notifications."""

    @abstractmethod
    def on_segment_start(self, index: int, total: int, name: str) -> None:
        """Called right before segment ``index`` of ``total`` is processed."""

    def on_finish(self) -> None:
        """Called once after the last segment has been flushed."""

    def close(self) -> None:
        """Release any display resources. Safe to call more than once."""


class NullProgress(ProgressObserver):
    """Observer that ignores every notification."""

    def on_segment_start(self, index: int, total: int, name: str) -> None:
        pass


class LoggingProgress(ProgressObserver):
    """Observer that logs one INFO line per segment."""

    def on_segment_start(self, index: int, total: int, name: str) -> None:
        logger.info("Processing segment %d/%d: %s", index + 1, total, name)

    def on_finish(self) -> None:
        logger.info("All segments processed")


class TqdmProgress(ProgressObserver):
    """Observer that renders a tqdm progress bar.

    The bar is created lazily on the first notification, when the total
    segment count is known.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._bar: Optional[tqdm] = None

    def on_segment_start(self, index: int, total: int, name: str) -> None:
        if self._bar is None:
            self._bar = tqdm(
                total=total,
                file=self._stream,
                unit="file",
                bar_format=_BAR_FORMAT,
                ascii=" #",
            )
        self._bar.set_description_str("Process {}".format(name))
        self._bar.update(1)

    def on_finish(self) -> None:
        self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def make_observer(enabled: bool, stream: Optional[IO[str]] = None) -> ProgressObserver:
    """Pick a progress observer for the current environment.

    RULES:
    - Disabled -> NullProgress
    - Enabled on a TTY -> TqdmProgress
    - Enabled elsewhere (pipes, CI logs) -> LoggingProgress
    """
    if not enabled:
        return NullProgress()
    stream = stream if stream is not None else sys.stderr
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        return TqdmProgress(stream)
    return LoggingProgress()

"""Ordering and concatenation core.

WHY: These two modules hold the only logic with real contracts: deciding
the chronological order of segments and streaming them into one sink.
Everything else in the package is CLI and display plumbing.

HOW: ordering.py maps filenames to numeric keys and sorts them.
concat.py decompresses each segment in that order into the output.

RULES:
- Ordering is pure and finishes before any file is opened
- Concatenation is strictly sequential and aborts on the first error
"""

from logstitch.core.concat import ConcatSummary, RunState, StreamConcatenator, decompress_into, stitch
from logstitch.core.ordering import SegmentKey, extract_key, resolve

__all__ = [
    "ConcatSummary",
    "RunState",
    "SegmentKey",
    "StreamConcatenator",
    "decompress_into",
    "extract_key",
    "resolve",
    "stitch",
]

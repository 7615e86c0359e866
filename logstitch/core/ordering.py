"""Filename-based ordering of rotated log segments.

WHY: Rotated logs are named ``app.log.1.gz``, ``app.log.2.gz``, ...,
``app.log.30.gz``. Shell globs and directory listings return them in
lexicographic order, which puts 30 before 4. The stitched log is only
correct if segments are concatenated in numeric order of that index.

HOW: extract_key() reads the last-but-one dot-separated piece of the
file's basename and parses it as a non-negative integer. resolve()
computes every key up front, stable-sorts (key, name) pairs and checks
for collisions according to the duplicate policy.

RULES:
- Filenames look like <stem>.<N>.<ext>; N is ASCII digits only
- Keys are compared numerically, never as strings
- Every name is validated before the result is returned
- Duplicate keys raise DuplicateKeyError unless the policy is "last"
- Pure: no filesystem access
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from itertools import groupby
from pathlib import PurePath
from typing import Iterable, List

from logstitch.config import DUPLICATE_POLICIES
from logstitch.errors import DuplicateKeyError, MalformedFilenameError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SegmentKey:
    """A segment reference paired with its ordering key."""

    key: int
    name: str


def extract_key(name: str) -> int:
    """Extract the numeric ordering key from a segment filename.

    ``a.log.4.gz`` -> 4. Only the final path component is inspected, so
    ``/var/log/app.d/app.log.4.gz`` also yields 4.

    The key must be plain ASCII digits. A sign is not accepted, so
    ``app.log.+4.gz`` is malformed even though some integer parsers
    would read it as 4.

    Raises:
        MalformedFilenameError: No key piece exists, or it is not made of
            ASCII digits.
    """
    pieces = PurePath(name).name.split(".")
    if len(pieces) < 2:
        raise MalformedFilenameError(name, "no ordering key segment")

    candidate = pieces[-2]
    if not _KEY_PATTERN.fullmatch(candidate):
        raise MalformedFilenameError(
            name, "ordering key {!r} is not a non-negative integer".format(candidate)
        )
    return int(candidate)


def _keyed(names: Iterable[str]) -> List[SegmentKey]:
    return [SegmentKey(key=extract_key(name), name=name) for name in names]


def resolve(names: Iterable[str], on_duplicate: str = "error") -> List[str]:
    """Order segment filenames by their numeric ordering key.

    Args:
        names: Segment references in any order.
        on_duplicate: ``"error"`` to reject inputs sharing a key, or
            ``"last"`` to keep only the last-seen name for each key.

    Returns:
        The names sorted ascending by ordering key.

    Raises:
        MalformedFilenameError: A name has no parsable ordering key.
        DuplicateKeyError: Two names share a key and the policy is "error".
        ValueError: Unknown duplicate policy.
    """
    if on_duplicate not in DUPLICATE_POLICIES:
        raise ValueError(
            "Unknown duplicate policy {!r}: expected one of {}".format(
                on_duplicate, ", ".join(DUPLICATE_POLICIES)
            )
        )

    # sorted() is stable, so names sharing a key keep their input order
    keyed = sorted(_keyed(names), key=lambda item: item.key)

    ordered: List[str] = []
    for key, group in groupby(keyed, key=lambda item: item.key):
        members = [item.name for item in group]
        if len(members) > 1:
            if on_duplicate == "error":
                raise DuplicateKeyError(key, members)
            logger.warning(
                "Ordering key %d shared by %d files, keeping %s",
                key, len(members), members[-1],
            )
        ordered.append(members[-1])
        logger.debug("Segment key %d -> %s", key, members[-1])

    return ordered

"""Configuration defaults and .env loading.

WHY: Buffer size, duplicate-key policy, progress display and log level
are the only knobs of the pipeline. Keeping them here, overridable from
the environment, means the CLI and tests share one source of defaults.

HOW: python-dotenv loads the .env file on import. Defaults are read from
the environment as module-level constants; the parse_* helpers validate
values coming from either the environment or the command line.

RULES:
- All defaults can be overridden via LOGSTITCH_* environment variables
- Invalid values raise ValueError with a message naming the setting
- GZIP_MAGIC is the two-byte header every segment must start with
"""

from __future__ import annotations

import os
from typing import Union

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

GZIP_MAGIC = b"\x1f\x8b"
"""First two bytes of every gzip member (RFC 1952)."""

DUPLICATE_POLICIES = ("error", "last")
"""Accepted values for the duplicate ordering key policy."""

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_buffer_size(value: Union[str, int]) -> int:
    """Parse a copy buffer size in bytes.

    RULES:
    - Accepts ints and decimal strings
    - Must be a positive integer
    """
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ValueError(
            "Invalid buffer size {!r}: expected a positive integer".format(value)
        ) from None
    if size <= 0:
        raise ValueError(
            "Invalid buffer size {!r}: expected a positive integer".format(value)
        )
    return size


def parse_duplicate_policy(value: str) -> str:
    """Validate a duplicate key policy name (case-insensitive)."""
    policy = value.strip().lower()
    if policy not in DUPLICATE_POLICIES:
        raise ValueError(
            "Invalid duplicate policy {!r}: expected one of {}".format(
                value, ", ".join(DUPLICATE_POLICIES)
            )
        )
    return policy


def parse_bool(value: str) -> bool:
    """Parse a boolean flag such as LOGSTITCH_PROGRESS."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError("Invalid boolean value {!r}".format(value))


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_BUFFER_SIZE = parse_buffer_size(os.getenv("LOGSTITCH_BUFFER_SIZE", "65536"))
DEFAULT_DUPLICATE_POLICY = parse_duplicate_policy(os.getenv("LOGSTITCH_DUPLICATES", "error"))
DEFAULT_PROGRESS = parse_bool(os.getenv("LOGSTITCH_PROGRESS", "true"))
DEFAULT_LOG_LEVEL = os.getenv("LOGSTITCH_LOG_LEVEL", "WARNING").upper()

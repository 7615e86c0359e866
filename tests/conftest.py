"""Shared test fixtures for the logstitch test suite.

WHY: Most tests need real gzip segment files on disk with known
decompressed content. Building them in one place keeps every test
working from the same helpers.

HOW: write_segment writes gzip data into tmp_path; make_segments builds
a rotated set (stem.N.gz) from a dict of key -> content.

RULES:
- All file I/O happens under pytest's tmp_path.
- HELLO_WORLD_GZ is a gzip stream produced by the gzip CLI (it carries
  an embedded filename field), decompressing to b"Hello World\\n".
"""

import gzip
from pathlib import Path
from typing import Callable, Dict, List

import pytest


HELLO_WORLD_GZ = bytes([
    0x1f, 0x8b, 0x08, 0x08, 0x60, 0x6d, 0xd8, 0x62, 0x00, 0x03, 0x69, 0x6e, 0x2e, 0x74, 0x78,
    0x74, 0x00, 0xf3, 0x48, 0xcd, 0xc9, 0xc9, 0x57, 0x08, 0xcf, 0x2f, 0xca, 0x49, 0xe1, 0x02,
    0x00, 0xe3, 0xe5, 0x95, 0xb0, 0x0c, 0x00, 0x00, 0x00,
])


@pytest.fixture
def write_segment(tmp_path) -> Callable[..., Path]:
    """Return a helper that writes gzip-compressed ``content`` to ``name``."""

    def _write(name: str, content: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(gzip.compress(content))
        return path

    return _write


@pytest.fixture
def make_segments(write_segment) -> Callable[..., List[str]]:
    """Return a helper that writes ``app.log.<N>.gz`` for each key.

    The returned paths are deliberately in reverse key order.
    """

    def _make(contents: Dict[int, bytes], stem: str = "app.log") -> List[str]:
        paths = [
            str(write_segment("{}.{}.gz".format(stem, key), data))
            for key, data in contents.items()
        ]
        return sorted(paths, reverse=True)

    return _make


@pytest.fixture
def hello_world_gz() -> bytes:
    """Gzip stream that decompresses to b"Hello World\\n"."""
    return HELLO_WORLD_GZ

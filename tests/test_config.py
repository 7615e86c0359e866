"""Unit tests for the config module.

WHY: Config values come from the environment and the command line; a
bad value must fail with a message naming the setting, not deep inside
the copy loop.
"""

import importlib

import pytest

from logstitch import config
from logstitch.config import (
    DUPLICATE_POLICIES,
    GZIP_MAGIC,
    parse_bool,
    parse_buffer_size,
    parse_duplicate_policy,
)


class TestParseBufferSize:

    def test_string_value(self):
        assert parse_buffer_size("4096") == 4096

    def test_int_value(self):
        assert parse_buffer_size(1) == 1

    def test_annotation_uses_typing_union(self):
        assert parse_buffer_size.__annotations__["value"] == "Union[str, int]"

    @pytest.mark.parametrize("value", ["0", "-5", "big", "", "1.5"])
    def test_invalid_values(self, value):
        with pytest.raises(ValueError, match="buffer size"):
            parse_buffer_size(value)


class TestParseDuplicatePolicy:

    def test_known_policies(self):
        for policy in DUPLICATE_POLICIES:
            assert parse_duplicate_policy(policy) == policy

    def test_case_insensitive(self):
        assert parse_duplicate_policy(" LAST ") == "last"

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="duplicate policy"):
            parse_duplicate_policy("first")


class TestParseBool:

    @pytest.mark.parametrize("value", ["1", "true", "Yes", "ON"])
    def test_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_false(self, value):
        assert parse_bool(value) is False

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestEnvironmentDefaults:
    """LOGSTITCH_* variables override the module defaults."""

    def test_gzip_magic(self):
        assert GZIP_MAGIC == b"\x1f\x8b"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LOGSTITCH_BUFFER_SIZE", "1024")
        monkeypatch.setenv("LOGSTITCH_DUPLICATES", "last")
        monkeypatch.setenv("LOGSTITCH_PROGRESS", "false")
        monkeypatch.setenv("LOGSTITCH_LOG_LEVEL", "debug")
        try:
            reloaded = importlib.reload(config)
            assert reloaded.DEFAULT_BUFFER_SIZE == 1024
            assert reloaded.DEFAULT_DUPLICATE_POLICY == "last"
            assert reloaded.DEFAULT_PROGRESS is False
            assert reloaded.DEFAULT_LOG_LEVEL == "DEBUG"
        finally:
            monkeypatch.undo()
            importlib.reload(config)

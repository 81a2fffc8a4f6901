"""Tests for environment overrides in config.py."""

import pytest

from whisper_converter import config


class TestEnvInt:

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("WHISPER_TEST_VALUE", raising=False)
        assert config._env_int("WHISPER_TEST_VALUE", 42) == 42

    def test_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv("WHISPER_TEST_VALUE", "  ")
        assert config._env_int("WHISPER_TEST_VALUE", 42) == 42

    def test_override(self, monkeypatch):
        monkeypatch.setenv("WHISPER_TEST_VALUE", " 250 ")
        assert config._env_int("WHISPER_TEST_VALUE", 42) == 250

    def test_non_integer_raises(self, monkeypatch):
        monkeypatch.setenv("WHISPER_TEST_VALUE", "lots")
        with pytest.raises(ValueError, match="WHISPER_TEST_VALUE must be an integer"):
            config._env_int("WHISPER_TEST_VALUE", 42)

    @pytest.mark.parametrize("raw", ["0", "-5"])
    def test_non_positive_raises(self, monkeypatch, raw):
        monkeypatch.setenv("WHISPER_TEST_VALUE", raw)
        with pytest.raises(ValueError, match="must be positive"):
            config._env_int("WHISPER_TEST_VALUE", 42)


class TestDefaults:

    def test_fixed_constants(self):
        assert config.PARAGRAPH_GAP_S == 2.0
        assert config.CLEAN_TEXT_FILLER_LIMIT == 100_000
        assert config.FILLER_WORDS == ("um", "uh", "er", "ah")

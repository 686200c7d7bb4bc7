"""Tests for configuration, settings and logging setup."""

import dataclasses
import logging

import pytest

from cartwatch_core.config import Config, Settings, _env_bool
from cartwatch_core.log_config import setup_logging


@pytest.mark.parametrize("raw,expected", [
    ("true", True),
    ("1", True),
    ("YES", True),
    ("false", False),
    ("0", False),
    ("", False),
])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("CARTWATCH_TEST_FLAG", raw)
    assert _env_bool("CARTWATCH_TEST_FLAG", "true") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("CARTWATCH_TEST_FLAG", raising=False)
    assert _env_bool("CARTWATCH_TEST_FLAG", "true") is True


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.auto_detect
        assert settings.show_confirmation
        assert not settings.sync_enabled
        assert settings.api_endpoint == ""

    def test_from_camel_case(self):
        settings = Settings.from_dict({
            "autoDetect": False,
            "showConfirmation": False,
            "syncEnabled": True,
            "apiEndpoint": "https://api.example/cart",
        })
        assert settings == Settings(False, False, True, "https://api.example/cart")
        assert Settings.from_dict(settings.to_dict()) == settings

    def test_from_snake_case_and_empty(self):
        assert Settings.from_dict({"sync_enabled": True}).sync_enabled
        assert Settings.from_dict(None) == Settings()

    def test_string_flags_are_parsed(self):
        settings = Settings.from_dict({
            "autoDetect": "false",
            "showConfirmation": "0",
            "syncEnabled": "YES",
        })
        assert settings.auto_detect is False
        assert settings.show_confirmation is False
        assert settings.sync_enabled is True

    def test_null_flags_use_defaults(self):
        settings = Settings.from_dict({"autoDetect": None, "syncEnabled": None})
        assert settings.auto_detect is True
        assert settings.sync_enabled is False

    def test_read_only(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Settings().auto_detect = False


class TestConfig:

    def test_settings_view(self):
        cfg = Config(auto_detect=False, api_endpoint="https://api.example")
        settings = cfg.settings()
        assert settings.auto_detect is False
        assert settings.api_endpoint == "https://api.example"

    def test_windows_are_numbers(self):
        cfg = Config()
        assert cfg.duplicate_window > 0
        assert cfg.signature_ttl > 0
        assert cfg.release_delay >= 0


def test_setup_logging_sets_root_level():
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)

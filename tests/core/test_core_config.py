"""
Tests for core.config — engine settings and logging setup.
"""

import logging
from datetime import timezone

import pytest

from core.config import LOG_FORMAT, EngineSettings, configure_logging


# ── EngineSettings Tests ─────────────────────────────────────

class TestEngineSettings:
    def test_defaults(self):
        settings = EngineSettings()
        assert settings.default_currency == "USD"
        assert settings.log_level == "INFO"
        assert settings.logger_name == "catalog"
        assert settings.timezone == "UTC"

    def test_invalid_currency(self):
        with pytest.raises(ValueError, match="3-letter"):
            EngineSettings(default_currency="US1")

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="log_level"):
            EngineSettings(log_level="LOUD")

    def test_empty_logger_name(self):
        with pytest.raises(ValueError, match="logger_name"):
            EngineSettings(logger_name="")

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            EngineSettings(timezone="Mars/Olympus")

    def test_store_tz(self):
        assert EngineSettings(timezone="utc").store_tz is timezone.utc

    def test_frozen_immutability(self):
        settings = EngineSettings()
        with pytest.raises(AttributeError):
            settings.log_level = "DEBUG"

    def test_to_dict(self):
        assert EngineSettings().to_dict() == {
            "default_currency": "USD",
            "log_level": "INFO",
            "logger_name": "catalog",
            "timezone": "UTC",
        }


class TestFromEnv:
    def test_reads_environment(self):
        settings = EngineSettings.from_env({
            "CATALOG_DEFAULT_CURRENCY": "kes",
            "CATALOG_LOG_LEVEL": "debug",
            "CATALOG_LOGGER_NAME": "menu",
        })
        assert settings == EngineSettings(default_currency="KES", log_level="DEBUG", logger_name="menu")

    def test_missing_values_use_defaults(self):
        assert EngineSettings.from_env({}) == EngineSettings()

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv("CATALOG_DEFAULT_CURRENCY", "EUR")
        monkeypatch.delenv("CATALOG_LOG_LEVEL", raising=False)
        monkeypatch.delenv("CATALOG_LOGGER_NAME", raising=False)
        monkeypatch.delenv("CATALOG_TIMEZONE", raising=False)
        assert EngineSettings.from_env().default_currency == "EUR"

    def test_invalid_environment_rejected(self):
        with pytest.raises(ValueError):
            EngineSettings.from_env({"CATALOG_LOG_LEVEL": "chatty"})

    def test_invalid_timezone_rejected(self):
        with pytest.raises(ValueError, match="Mars/Olympus"):
            EngineSettings.from_env({"CATALOG_TIMEZONE": "Mars/Olympus"})


# ── Logging Tests ────────────────────────────────────────────

class TestConfigureLogging:
    def _cleanup(self, logger):
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

    def test_attaches_stream_handler(self):
        logger = configure_logging(EngineSettings(logger_name="catalog_test_attach"))
        try:
            assert logger.name == "catalog_test_attach"
            assert logger.level == logging.INFO
            assert len(logger.handlers) == 1
            assert logger.handlers[0].formatter._fmt == LOG_FORMAT
        finally:
            self._cleanup(logger)

    def test_idempotent(self):
        configure_logging(EngineSettings(logger_name="catalog_test_repeat"))
        logger = configure_logging(
            EngineSettings(logger_name="catalog_test_repeat", log_level="ERROR"),
        )
        try:
            assert len(logger.handlers) == 1
            assert logger.level == logging.ERROR
            assert logger.handlers[0].level == logging.ERROR
        finally:
            self._cleanup(logger)

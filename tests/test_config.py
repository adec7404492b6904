"""Tests for settings and logging setup."""

import logging

import structlog

from py_mapcanvas.config import Settings
from py_mapcanvas.utils.logging import configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MAPCANVAS_SEED", raising=False)
        settings = Settings(_env_file=None)
        assert (settings.default_width, settings.default_height) == (800, 600)
        assert settings.point_count == 3000
        assert settings.render_mode == "pixel"
        assert settings.seed is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAPCANVAS_DEFAULT_WIDTH", "1024")
        monkeypatch.setenv("MAPCANVAS_SEED", "99")
        monkeypatch.setenv("MAPCANVAS_LOG_FORMAT", "json")
        settings = Settings(_env_file=None)
        assert settings.default_width == 1024
        assert settings.seed == 99
        assert settings.log_format == "json"


class TestLogging:
    """Test logging configuration."""

    def test_configure_console(self):
        configure_logging("DEBUG", "console")
        assert logging.getLogger().level == logging.DEBUG
        structlog.get_logger().debug("Logging configured", fmt="console")

    def test_configure_json(self):
        configure_logging("warning", "json")
        assert logging.getLogger().level == logging.WARNING
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        configure_logging("INFO", "console")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

"""Unit tests for libcurator.logging_config."""

from __future__ import annotations

import json

import pytest
import structlog

from libcurator.config import LoggingSettings
from libcurator.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_lines_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="INFO", format="json"))
        structlog.get_logger().info("package_fetch_failed", name="ghost", code="PACKAGE_NOT_FOUND")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "package_fetch_failed"
        assert event["name"] == "ghost"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_lower_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="WARNING", format="json"))
        log = structlog.get_logger()
        log.info("search_complete")
        log.warning("search_failed", query="x")

        err = capsys.readouterr().err
        assert "search_complete" not in err
        assert "search_failed" in err

    def test_text_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(LoggingSettings(level="DEBUG", format="text"))
        structlog.get_logger().debug("registry_cache_hit", url="https://example.com")

        err = capsys.readouterr().err
        assert "registry_cache_hit" in err
        assert "url=https://example.com" in err

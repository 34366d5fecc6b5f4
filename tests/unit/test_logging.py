"""
Tests for the logging module.
"""

import json
import logging

import pytest
import structlog


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_development_mode(self):
        from core.logging import configure_logging

        configure_logging(json_logs=False, log_level="DEBUG")

    def test_configure_production_mode(self):
        from core.logging import configure_logging

        configure_logging(json_logs=True, log_level="INFO")

    def test_configure_log_level(self):
        from core.logging import configure_logging

        configure_logging(log_level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_urllib3_is_quiet(self):
        from core.logging import configure_logging

        configure_logging(log_level="DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING


class TestGetLogger:

    def test_logger_can_log(self):
        from core.logging import configure_logging, get_logger

        configure_logging(json_logs=False, log_level="DEBUG")
        logger = get_logger("test")

        logger.info("Search completed", mode="hybrid", hidden=1)
        logger.debug("Planned search", filters={"price": 500})
        logger.warning("Weaviate reported query errors", errors=["bad"])


class TestContextBinding:

    def test_bind_and_clear_context(self):
        from core.logging import bind_context, clear_context

        clear_context()
        bind_context(request_id="abc", path="/api/search")

        ctx = structlog.contextvars.get_contextvars()
        assert ctx.get("request_id") == "abc"
        assert ctx.get("path") == "/api/search"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestJSONOutput:

    def test_json_output_is_valid_json(self, capsys):
        from core.logging import configure_logging, get_logger

        configure_logging(json_logs=True, log_level="INFO")
        logger = get_logger("json_test")

        logger.info("Search completed", search_ms=12)

        captured = capsys.readouterr()
        if captured.out:
            for line in captured.out.strip().split("\n"):
                if line:
                    data = json.loads(line)
                    assert "event" in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

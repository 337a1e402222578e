"""Tests for structlog configuration."""

import io
import json

import pytest
import structlog

from newsletter import main
from newsletter.core.config import Settings
from newsletter.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_structlog():
    """Put back the session configuration after each test reconfigures structlog."""
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


def test_json_format_emits_one_json_record():
    stream = io.StringIO()
    log = configure_logging("newsletter-test", "info", "json", stream=stream)
    log.info("subscription.created", subscriber_id="abc")

    record = json.loads(stream.getvalue().strip())
    assert record["event"] == "subscription.created"
    assert record["level"] == "info"
    assert record["service"] == "newsletter-test"
    assert record["subscriber_id"] == "abc"
    assert "timestamp" in record


def test_text_format_emits_a_console_line():
    stream = io.StringIO()
    log = configure_logging("newsletter-test", "debug", "text", stream=stream)
    log.debug("newsletter.starting")

    assert "newsletter.starting" in stream.getvalue()


def test_records_below_the_level_are_dropped():
    stream = io.StringIO()
    log = configure_logging("newsletter-test", "warning", "json", stream=stream)
    log.info("request.completed")
    log.warning("email.slow")

    lines = stream.getvalue().strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["email.slow"]


def test_module_loggers_follow_the_configuration():
    stream = io.StringIO()
    configure_logging("newsletter-test", "info", "json", stream=stream)
    structlog.get_logger().info("newsletter.config_loaded")

    assert json.loads(stream.getvalue())["event"] == "newsletter.config_loaded"


def test_server_logger_is_bound_to_the_service(capsys, monkeypatch):
    monkeypatch.setattr(main, "log", main.log)
    settings = Settings(logging={"level": "info", "format": "json"})

    returned = main.setup_logging(settings)
    main.log.info("newsletter.config_loaded")

    assert main.log is returned
    record = json.loads(capsys.readouterr().err.strip())
    assert record["event"] == "newsletter.config_loaded"
    assert record["service"] == "newsletter"

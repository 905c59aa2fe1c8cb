"""Tests for logging configuration."""

import io
import json
import logging

import structlog

from filterdesk.infrastructure.config import LoggingConfig
from filterdesk.infrastructure.logging_config import configure_from_config


def test_json_logs_go_to_stream():
    stream = io.StringIO()
    configure_from_config(LoggingConfig(level="INFO", format="json"), stream=stream)

    structlog.get_logger("filterdesk.test").info("Rule created", rule_id=42)

    event = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert event["event"] == "Rule created"
    assert event["rule_id"] == 42
    assert event["level"] == "info"


def test_httpx_request_logs_are_quieted():
    configure_from_config(LoggingConfig(level="DEBUG"), stream=io.StringIO())

    assert logging.getLogger("httpx").level == logging.WARNING

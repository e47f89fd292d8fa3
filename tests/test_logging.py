"""Tests for the logging processor chain."""

import structlog

from beer_service.observability.logging import build_processors


def test_json_format_ends_with_json_renderer():
    processors = build_processors("json")

    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert structlog.processors.format_exc_info in processors


def test_console_format_ends_with_console_renderer():
    processors = build_processors("console")

    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert structlog.processors.format_exc_info not in processors


def test_json_lines_carry_level_and_timestamp():
    processors = build_processors("json")
    event = {"event": "beer_added", "id": 4}

    for processor in processors[:-1]:
        event = processor(None, "info", event)

    assert event["level"] == "info"
    assert "timestamp" in event
    assert processors[-1](None, "info", event).startswith("{")

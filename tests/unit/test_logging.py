"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

from slash_vibe_pr.logging import JsonFormatter, configure_logging, resolve_level


@pytest.mark.parametrize(
    ("name", "level"),
    [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("WARN", logging.WARNING),
        ("warning", logging.WARNING),
        ("ERROR", logging.ERROR),
    ],
)
def test_resolve_level_known(name: str, level: int) -> None:
    assert resolve_level(name) == (level, True)


def test_resolve_level_unknown_defaults_to_info() -> None:
    assert resolve_level("LOUD") == (logging.INFO, False)


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="slash_vibe_pr.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Could not find PR #%s",
        args=("7",),
        exc_info=None,
    )
    record.view_id = "V1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "slash_vibe_pr.test"
    assert payload["message"] == "Could not find PR #7"
    assert payload["extra"] == {"view_id": "V1"}


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("WARN")
        configure_logging("DEBUG")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("redis").level == logging.INFO
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

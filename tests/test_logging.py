"""Request id propagation into formatted log lines"""

import json
import logging

from src.core.logging import RequestContext, get_request_id
from src.core.logging.formatters import DevFormatter, JsonFormatter


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="src.market_insight.services.news_reconciliation",
        level=level, pathname=__file__, lineno=1, msg=message, args=(), exc_info=None,
    )


def test_request_context_scopes_id():
    assert get_request_id() is None
    with RequestContext(request_id="req-1"):
        assert get_request_id() == "req-1"
    assert get_request_id() is None


def test_json_formatter_includes_request_id():
    with RequestContext(request_id="abc123"):
        line = JsonFormatter().format(_record("[News] AAPL: 3 fetched"))

    entry = json.loads(line)
    assert entry["request_id"] == "abc123"
    assert entry["level"] == "INFO"
    assert entry["message"] == "[News] AAPL: 3 fetched"
    assert entry["timestamp"].endswith("Z")


def test_dev_formatter_without_colors():
    line = DevFormatter(use_colors=False).format(_record("hello", logging.WARNING))

    assert "| WARNING |" in line
    assert line.endswith("hello")
    assert "\x1b[" not in line

"""
Log Formatters
==============

Development (text):
    2026-01-11 12:00:00 | INFO  | market_insight.news    | [a1b2c3d4e5f6] [NewsAPI] 20 articles fetched

Production (JSON):
    {"timestamp": "2026-01-11T12:00:00Z", "level": "INFO", "logger": "...", "request_id": "...", "message": "..."}
"""

import json
import logging
from datetime import datetime, timezone

from src.core.logging.context import get_request_id


class DevFormatter(logging.Formatter):
    """Readable, optionally colored, single-line format for local runs."""

    COLORS = {
        "DEBUG": "\x1b[38;5;244m",
        "INFO": "\x1b[38;5;39m",
        "WARNING": "\x1b[38;5;208m",
        "ERROR": "\x1b[38;5;196m",
        "CRITICAL": "\x1b[38;5;196;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        request_id_str = f"[{request_id}] " if request_id else ""

        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(5)

        logger_name = record.name
        if len(logger_name) > 25:
            logger_name = "..." + logger_name[-22:]

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        line = f"{timestamp} | {level} | {logger_name.ljust(25)} | {request_id_str}{message}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            line = f"{color}{line}{self.RESET}"

        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        log_entry["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, ensure_ascii=False, default=str)

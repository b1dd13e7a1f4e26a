"""
Logging Configuration
=====================

Environment Variables:
---------------------
- LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_FORMAT: "json" for production, "text" for development (default)
- ENV_STATE: "prod" forces JSON output
"""

import os
import sys
import logging
from typing import Dict, Optional

from src.core.logging.formatters import DevFormatter, JsonFormatter


_configured_loggers: Dict[str, logging.Logger] = {}
_logging_initialized = False

# Upstream HTTP libraries log every request at INFO
NOISY_LOGGERS = ["httpx", "httpcore", "asyncio", "uvicorn.access"]


def get_config() -> dict:
    """Get logging configuration from environment."""
    return {
        "level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "format": os.environ.get("LOG_FORMAT", "text").lower(),
        "is_production": os.environ.get("ENV_STATE", "dev").lower() == "prod",
    }


def setup_logging(
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
) -> None:
    """
    Initialize the logging system. Safe to call more than once.

    Args:
        level: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: Override format (True for JSON, False for text)
    """
    global _logging_initialized

    if _logging_initialized:
        return

    config = get_config()
    if level:
        config["level"] = level.upper()
    if use_json is not None:
        config["format"] = "json" if use_json else "text"

    log_level = getattr(logging, config["level"], logging.INFO)
    use_json_format = config["format"] == "json" or config["is_production"]

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    if use_json_format:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(DevFormatter(use_colors=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _logging_initialized = True

    root_logger.info(
        f"Logging initialized: level={config['level']}, "
        f"format={'json' if use_json_format else 'text'}"
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger, initializing the logging system on first use.

    Args:
        name: Logger name (usually __name__). Defaults to "app".
    """
    if not _logging_initialized:
        setup_logging()

    name = name or "app"
    if name not in _configured_loggers:
        _configured_loggers[name] = logging.getLogger(name)
    return _configured_loggers[name]


def shutdown_logging() -> None:
    """Flush handlers and allow setup_logging() to run again."""
    global _logging_initialized

    logging.shutdown()
    _configured_loggers.clear()
    _logging_initialized = False

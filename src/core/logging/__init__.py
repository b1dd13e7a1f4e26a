"""
Service Logging
===============

- Console output: colored text in development, JSON in production
- Request ID tracing via contextvars
- Request/response logging middleware for FastAPI

Usage:
------
```python
from src.core.logging import setup_logging, get_logger

setup_logging()                 # once, at startup
logger = get_logger(__name__)   # anywhere
```
"""

from src.core.logging.config import setup_logging, get_logger, shutdown_logging
from src.core.logging.context import (
    RequestContext,
    get_request_id,
    set_request_id,
    clear_request_id,
)
from src.core.logging.middleware import LoggingMiddleware

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "RequestContext",
    "get_request_id",
    "set_request_id",
    "clear_request_id",
    "LoggingMiddleware",
]

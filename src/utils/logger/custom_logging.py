"""
Custom Logging
==============

Class-level access to the service logging system.

Usage:
    from src.utils.logger.custom_logging import LoggerMixin

    class FinnhubNewsProvider(LoggerMixin):
        def __init__(self):
            super().__init__()
            self.logger.info("ready")
"""

import logging

from src.core.logging import get_logger


class LogHandler(object):
    """Hands out loggers from the service logging system."""

    def get_logger(self, logger_name: str) -> logging.Logger:
        return get_logger(logger_name)


class LoggerMixin:
    """
    Mixin class that provides a ``self.logger`` named after the concrete class,
    e.g. ``src.market_insight.providers.finnhub_provider.FinnhubNewsProvider``.
    """

    def __init__(self) -> None:
        logger_name = f"{self.__class__.__module__}.{self.__class__.__name__}"
        self.logger = LogHandler().get_logger(logger_name)

"""
Middleware package for FastAPI application.

Available middleware:
- RateLimitMiddleware: Fixed-window, per-IP rate limiting
"""

from src.middleware.rate_limiter import (
    RateLimitMiddleware,
    RateLimitConfig,
    InMemoryRateLimiter,
)

__all__ = [
    "RateLimitMiddleware",
    "RateLimitConfig",
    "InMemoryRateLimiter",
]

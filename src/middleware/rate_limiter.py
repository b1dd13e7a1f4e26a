"""
Rate Limiting Middleware

Fixed-window, in-memory rate limiting per client IP. Each client gets
``limit`` requests per ``window`` seconds; the counter resets when the
window that started with the client's first request expires.

Usage in main.py:
    from src.middleware.rate_limiter import RateLimitMiddleware, RateLimitConfig

    app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig.from_settings(settings),
    )
"""

import time
import asyncio
from typing import Optional, Dict, Callable, Tuple
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin


@dataclass
class RateLimitConfig:
    """Rate limit configuration"""

    limit: int = 50  # requests per window
    window: int = 60  # seconds

    # Skip rate limiting for these paths
    skip_paths: list = field(default_factory=lambda: [
        "/docs",
        "/redoc",
        "/openapi.json",
    ])

    enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimitConfig":
        return cls(
            limit=settings.RATE_LIMIT_POINTS,
            window=settings.RATE_LIMIT_WINDOW,
            enabled=settings.RATE_LIMIT_ENABLED,
        )


class InMemoryRateLimiter:
    """Fixed-window counters keyed by client, held in process memory"""

    def __init__(self, clock: Callable[[], float] = time.time, prune_every: int = 1000):
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        # Expired windows are dropped once every prune_every calls to is_allowed
        self._prune_every = prune_every
        self._calls = 0

    async def is_allowed(
        self,
        key: str,
        limit: int,
        window: int
    ) -> Tuple[bool, int, int]:
        """
        Consume one request for ``key``.

        Returns:
            (allowed, remaining, reset_time)
        """
        now = self._clock()

        async with self._lock:
            self._calls += 1
            if self._calls >= self._prune_every:
                self._calls = 0
                self._drop_expired(now, window)

            window_start, count = self._windows.get(key, (now, 0))

            # Window expired, start a new one
            if now - window_start >= window:
                window_start, count = now, 0

            reset_time = int(window_start + window)

            if count >= limit:
                self._windows[key] = (window_start, count)
                return False, 0, reset_time

            count += 1
            self._windows[key] = (window_start, count)
            return True, limit - count, reset_time

    async def cleanup(self, window: int):
        """Drop counters whose window has expired"""
        async with self._lock:
            self._drop_expired(self._clock(), window)

    def _drop_expired(self, now: float, window: int):
        expired = [
            key for key, (window_start, _) in self._windows.items()
            if now - window_start >= window
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware, LoggerMixin):
    """
    Per-IP rate limiting. Rejected requests get a 429 with a JSON error body
    and the standard rate limit headers.
    """

    def __init__(
        self,
        app,
        config: Optional[RateLimitConfig] = None,
        limiter: Optional[InMemoryRateLimiter] = None,
    ):
        BaseHTTPMiddleware.__init__(self, app)
        LoggerMixin.__init__(self)
        self.config = config or RateLimitConfig()
        self.limiter = limiter or InMemoryRateLimiter()

    def _get_client_identifier(self, request: Request) -> str:
        """Client IP, honouring the first X-Forwarded-For hop"""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ip = forwarded.split(",")[0].strip()
        else:
            ip = request.client.host if request.client else "unknown"

        return f"ip:{ip}"

    def _should_skip(self, path: str) -> bool:
        return any(path.startswith(skip) for skip in self.config.skip_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.config.enabled or self._should_skip(request.url.path):
            return await call_next(request)

        client_id = self._get_client_identifier(request)
        limit, window = self.config.limit, self.config.window

        allowed, remaining, reset_time = await self.limiter.is_allowed(client_id, limit, window)

        if not allowed:
            retry_after = max(0, reset_time - int(time.time()))
            self.logger.warning(
                f"[RATE_LIMIT] Blocked: {client_id} on {request.url.path} "
                f"(limit={limit}/{window}s)"
            )

            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": "Too many requests, please try again later.",
                    "retry_after": retry_after,
                },
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset_time),
                    "Retry-After": str(retry_after),
                }
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset_time)

        return response

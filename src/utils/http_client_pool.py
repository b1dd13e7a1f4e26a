"""
Shared HTTP Client Pool

One httpx.AsyncClient per process, created at startup and handed to every
provider adapter. A semaphore caps the number of upstream requests in flight
across all adapters so a burst of dashboard requests cannot flood the
rate-limited data providers.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx

from src.utils.config import Settings
from src.utils.logger.custom_logging import LoggerMixin


# Connection pool limits
MAX_CONNECTIONS = 100
MAX_KEEPALIVE_CONNECTIONS = 20

# Timeouts
DEFAULT_TIMEOUT = 30  # seconds
CONNECT_TIMEOUT = 10  # seconds

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class HTTPClientManager(LoggerMixin):
    """
    HTTP client manager for centralized connection pooling.

    Usage:
        manager = HTTPClientManager(settings)
        data = await manager.get_json(url, params={...}, timeout=10.0)
        ...
        await manager.close()
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.settings = settings
        self._transport = transport
        self._httpx_client: Optional[httpx.AsyncClient] = None
        self._external_api_semaphore = asyncio.Semaphore(settings.MAX_CONCURRENT_UPSTREAM_CALLS)
        self._init_lock = asyncio.Lock()

        self.logger.info(
            f"[HTTP_POOL] HTTPClientManager initialized "
            f"(max_in_flight={settings.MAX_CONCURRENT_UPSTREAM_CALLS})"
        )

    async def _ensure_httpx_client(self) -> httpx.AsyncClient:
        """Lazily initialize httpx client with connection pooling"""
        if self._httpx_client is None or self._httpx_client.is_closed:
            async with self._init_lock:
                if self._httpx_client is None or self._httpx_client.is_closed:
                    limits = httpx.Limits(
                        max_connections=MAX_CONNECTIONS,
                        max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
                        keepalive_expiry=30.0,
                    )

                    timeout = httpx.Timeout(
                        timeout=DEFAULT_TIMEOUT,
                        connect=CONNECT_TIMEOUT,
                    )

                    self._httpx_client = httpx.AsyncClient(
                        limits=limits,
                        timeout=timeout,
                        headers={"User-Agent": USER_AGENT},
                        follow_redirects=True,
                        transport=self._transport,
                    )

                    self.logger.info("[HTTP_POOL] Created httpx client with pooling")

        return self._httpx_client

    @asynccontextmanager
    async def rate_limited_request(self):
        """Hold one of the global in-flight slots for the duration of a call."""
        async with self._external_api_semaphore:
            yield

    async def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Single GET attempt returning the decoded JSON body.

        Raises:
            httpx.HTTPStatusError: non-2xx response
            httpx.RequestError: transport failure or timeout
            ValueError: body is not JSON
        """
        client = await self._ensure_httpx_client()
        async with self.rate_limited_request():
            response = await client.get(
                url,
                params=params,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        response.raise_for_status()
        return response.json()

    @property
    def available_slots(self) -> int:
        return self._external_api_semaphore._value

    async def close(self):
        """Close all connections gracefully"""
        if self._httpx_client and not self._httpx_client.is_closed:
            await self._httpx_client.aclose()
            self.logger.info("[HTTP_POOL] Closed httpx client")

"""
Request Context
===============

Carries the request id across every log line emitted while a request is
being served, including lines logged from concurrently running provider
calls (contextvars are copied into tasks created by asyncio.gather).
"""

import uuid
from contextvars import ContextVar
from typing import Optional

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context.

    Args:
        request_id: Custom request ID. If None, generates a short UUID.

    Returns:
        The request ID that was set.
    """
    if request_id is None:
        request_id = uuid.uuid4().hex[:12]
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    _request_id_var.set(None)


class RequestContext:
    """
    Scope a request id to a block.

    Usage:
        with RequestContext(request_id="abc-123"):
            await service.analyze("AAPL")
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or uuid.uuid4().hex[:12]
        self._token = None

    def __enter__(self):
        self._token = _request_id_var.set(self.request_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _request_id_var.reset(self._token)
        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)

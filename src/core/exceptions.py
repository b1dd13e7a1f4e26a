"""Centralized exception handlers."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from src.core.logging.context import get_request_id


def register_exception_handlers(app: FastAPI) -> None:
    """
    Serve structured HTTPException details at the top level of the body,
    e.g. ``{"error": "...", "details": "..."}``. Plain string details keep
    FastAPI's ``{"detail": "..."}`` shape.
    """

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        content = exc.detail if isinstance(exc.detail, dict) else {"detail": exc.detail}
        headers = dict(exc.headers or {})
        request_id = get_request_id()
        if request_id:
            headers.setdefault("X-Request-ID", request_id)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

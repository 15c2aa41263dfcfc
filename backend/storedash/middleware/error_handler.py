"""
Global error handling middleware.

Uses pure ASGI middleware (not BaseHTTPMiddleware) so domain errors
raised from dependencies and handlers are translated in one place.
"""
import json

from fastapi import HTTPException
from starlette.types import ASGIApp, Receive, Scope, Send

from storedash.core.exceptions import BackendError, InvalidChangeError, NotFoundError
from storedash.core.logging import get_logger

logger = get_logger(__name__)


def _status_for(error: Exception) -> tuple[int, str]:
    if isinstance(error, NotFoundError):
        return 404, str(error) or "Not found"
    if isinstance(error, InvalidChangeError):
        return 422, str(error)
    if isinstance(error, BackendError):
        return 503, "Backend unavailable"
    return 500, "Internal server error"


class ErrorHandlerMiddleware:
    """
    Pure ASGI error handler.

    NotFoundError becomes 404, InvalidChangeError 422, BackendError 503
    and anything else 500.
    HTTPException is left to FastAPI's own handler.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            if isinstance(e, HTTPException):
                raise

            if response_started:
                # Headers already sent, can't change the response
                logger.exception(
                    "Unhandled exception after response started",
                    error=str(e),
                    path=scope.get("path", "unknown"),
                )
                raise

            status_code, detail = _status_for(e)
            if status_code == 500:
                logger.exception("Unhandled exception", error=str(e), path=scope.get("path", "unknown"))
            else:
                logger.warning(
                    "Request failed",
                    status=status_code,
                    error=str(e),
                    path=scope.get("path", "unknown"),
                )

            body = json.dumps({
                "detail": detail,
                "type": type(e).__name__,
            }).encode("utf-8")

            await send({
                "type": "http.response.start",
                "status": status_code,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })

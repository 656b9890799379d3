"""Global error handling middleware."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chat_proxy.utils.exceptions import ChatProxyError
from chat_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Global error handler middleware for consistent error responses.

    Proxy errors are rendered with their own status code; anything else is
    logged and answered with a generic 500 so one bad request never takes the
    process down.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any exceptions."""
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exceptions to JSON responses.

        Args:
            request: The incoming request
            exc: The exception that occurred

        Returns:
            JSON response with error details
        """
        request_id = getattr(request.state, "request_id", None)

        if isinstance(exc, ChatProxyError):
            logger.error(
                "%s %s failed with %s (%d): %s",
                request.method,
                request.url.path,
                exc.error_code,
                exc.status_code,
                exc.message,
            )
            return self._create_error_response(
                status_code=exc.status_code,
                error_code=exc.error_code,
                message=exc.message,
                details=exc.details if self.debug or exc.public_details else None,
                request_id=request_id,
            )

        logger.exception("Unhandled exception occurred")

        details = None
        if self.debug:
            details = {
                "message": str(exc),
                "type": type(exc).__name__,
                "traceback": traceback.format_exc(),
            }

        return self._create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_ERROR",
            message="Internal server error",
            details=details,
            request_id=request_id,
        )

    def _create_error_response(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Any = None,
        request_id: str | None = None,
    ) -> JSONResponse:
        content: dict[str, Any] = {
            "error": message,
            "code": error_code,
        }

        if details:
            content["details"] = details

        content["timestamp"] = utc_timestamp()

        headers = {}
        if request_id:
            headers["X-Request-ID"] = request_id

        return JSONResponse(
            status_code=status_code,
            content=content,
            headers=headers,
        )

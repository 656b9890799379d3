"""Blocks requests while the Ollama server is unreachable."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from chat_proxy.services.health import HealthProber

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_PATHS = ("/api/health", "/api/health/live")


class OllamaGatewayMiddleware(BaseHTTPMiddleware):
    """Checks upstream reachability before every non-health request.

    The check is a live round trip on each request; there is no cached flag.
    """

    def __init__(self, app, exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS):
        super().__init__(app)
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path.rstrip("/") or "/"
        if path in self.exempt_paths:
            return await call_next(request)

        prober: Optional[HealthProber] = getattr(request.app.state, "health_prober", None)
        if prober is None:
            return self._unavailable("Health prober is not initialised")

        try:
            await prober.is_reachable()
        except Exception as exc:
            logger.warning(
                "Rejecting %s %s: Ollama unreachable (%s)",
                request.method,
                request.url.path,
                exc,
            )
            return self._unavailable(str(exc))

        return await call_next(request)

    @staticmethod
    def _unavailable(details: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "service_unavailable",
                "error": "Ollama service is not available",
                "details": details,
            },
        )

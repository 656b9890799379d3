"""Health check endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chat_proxy.api.dependencies import HealthProberDep
from chat_proxy.schemas.health import HealthResponse
from chat_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Proxy, Ollama and model status",
    responses={500: {"description": "The health check itself failed"}},
)
async def health_check(prober: HealthProberDep):
    """
    Report the status of the proxy and its upstream.

    Always answers 200 while the proxy runs; a disconnected Ollama server or a
    missing model is reported in ``services``, not through the status code.
    """
    try:
        health = await prober.compute_health()
        return health.to_payload()
    except Exception as exc:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=500,
            content={
                "status": "unhealthy",
                "error": "Failed to check service status",
                "details": str(exc),
                "timestamp": utc_timestamp(),
            },
        )


@router.get("/health/live", summary="Liveness probe")
async def liveness_check() -> dict[str, str]:
    """
    Kubernetes-style liveness probe.
    Always returns 200 if the application is running.
    """
    return {"status": "alive"}

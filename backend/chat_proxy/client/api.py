"""Async client for the chat proxy's HTTP API.

Mirrors what the browser frontend does: it never raises. Transport, HTTP and
parsing failures come back as replies flagged with ``error=True`` so callers
can render them like any other bot message.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_OPTIONS: Dict[str, Any] = {
    "temperature": 0.7,
    "top_p": 0.9,
    "max_tokens": 2048,
}

GENERIC_FAILURE_TEXT = "An error occurred while processing your message."
CONNECTION_FAILURE_TEXT = "Could not connect to the server. Check your connection."
UPSTREAM_FAILURE_TEXT = "The AI server is not responding. Please try again later."


@dataclass(slots=True)
class ChatReply:
    """Outcome of a single ``send_message`` call."""

    text: str
    metadata: Optional[Dict[str, Any]] = None
    error: bool = False
    details: Optional[str] = None


@dataclass(slots=True)
class ServerStatus:
    """What ``/api/health`` said about the proxy and its upstream."""

    status: str
    ollama_status: str
    model_status: str
    error: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.ollama_status == "connected" and self.model_status == "available"


class ChatApiError(Exception):
    """Raised internally when the proxy answers with an error status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatApiClient:
    """Talks to ``/api/generate`` and ``/api/health`` of a running proxy."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        *,
        timeout: float = 300.0,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._debug = debug
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def send_message(
        self,
        prompt: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> ChatReply:
        """Ask the proxy for a reply to ``prompt``."""
        body = {
            "prompt": prompt,
            "options": {**DEFAULT_CLIENT_OPTIONS, **(options or {})},
        }

        start = time.perf_counter()
        try:
            response = await self._client.post("/api/generate", json=body)
            data = response.json()
            if response.is_error:
                message = data.get("error") if isinstance(data, dict) else None
                raise ChatApiError(
                    message or f"HTTP error! status: {response.status_code}",
                    response.status_code,
                )
            text = data["response"]
        except Exception as exc:
            logger.error("Error sending message: %s", exc)
            return ChatReply(
                text=self._friendly_message(exc),
                error=True,
                details=str(exc) if self._debug else None,
            )

        logger.debug("Response received in %.2fs", time.perf_counter() - start)
        return ChatReply(
            text=text,
            metadata={
                "model": data.get("model"),
                "createdAt": data.get("createdAt"),
                "metrics": data.get("metrics"),
            },
        )

    async def check_server_status(self) -> ServerStatus:
        """Fetch ``/api/health``; failures report everything as down."""
        try:
            response = await self._client.get("/api/health")
            response.raise_for_status()
            data = response.json()
            services = data.get("services") or {}
            model = services.get("model") or {}
            return ServerStatus(
                status=data.get("status", "unhealthy"),
                ollama_status="connected" if services.get("ollama") == "connected" else "disconnected",
                model_status=model.get("status") or "unavailable",
            )
        except Exception as exc:
            logger.error("Error checking server status: %s", exc)
            return ServerStatus(
                status="unhealthy",
                ollama_status="disconnected",
                model_status="unavailable",
                error=str(exc),
            )

    def cancel_request(self) -> None:
        """Placeholder for aborting an in-flight generation.

        In-flight requests are not tracked yet, so this only logs.
        """
        logger.warning("Cancel request feature not fully implemented")

    @staticmethod
    def _friendly_message(exc: Exception) -> str:
        if isinstance(exc, httpx.TransportError):
            return CONNECTION_FAILURE_TEXT
        if isinstance(exc, ChatApiError) and exc.status_code in (503, 504):
            return UPSTREAM_FAILURE_TEXT
        return GENERIC_FAILURE_TEXT

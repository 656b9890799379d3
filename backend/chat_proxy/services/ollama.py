"""Async client for the Ollama inference server."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from chat_proxy.config.settings import Settings
from chat_proxy.utils.exceptions import UpstreamError, classify_upstream_error

logger = logging.getLogger(__name__)

TAGS_PATH = "/api/tags"
SHOW_PATH = "/api/show"
GENERATE_PATH = "/api/generate"


class OllamaClient:
    """Thin adapter over the Ollama HTTP API.

    Every call is a single attempt: failures are classified and raised to the
    caller, which decides how to surface them.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()
        self._closed = False

    async def startup(self) -> None:
        """Initialise the HTTP client."""

        async with self._client_lock:
            self._closed = False
            if self._client is not None:
                return
            self._client = httpx.AsyncClient(
                base_url=self._settings.ollama_host,
                timeout=httpx.Timeout(self._settings.ollama_timeout_seconds),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        logger.info(
            "Initialised Ollama client for %s with timeout %.1fs",
            self._settings.ollama_host,
            self._settings.ollama_timeout_seconds,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client. Later calls fail until ``startup()`` runs again."""

        async with self._client_lock:
            self._closed = True
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    @property
    def model_name(self) -> str:
        return self._settings.ollama_model

    async def get_tags(self) -> Dict[str, Any]:
        """List the models installed on the server."""
        return await self._request("GET", TAGS_PATH)

    async def show_model(self, name: str) -> Dict[str, Any]:
        """Fetch metadata for ``name``; fails if the model is not installed."""
        return await self._request("POST", SHOW_PATH, json={"name": name})

    async def generate(
        self,
        payload: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Run a non-streaming completion.

        Args:
            payload: Body for ``/api/generate`` (model, prompt, stream, options)
            timeout: Per-call deadline in seconds, defaults to the generate timeout

        Raises:
            UpstreamHTTPError: Ollama answered with an error status
            UpstreamTimeoutError: The deadline expired
            UpstreamUnavailableError: The server could not be reached
            UpstreamError: Any other failure
        """
        if timeout is None:
            timeout = self._settings.generate_timeout_seconds
        return await self._request("POST", GENERATE_PATH, json=payload, timeout=timeout)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        client = await self._require_client()
        effective_timeout = timeout if timeout is not None else self._settings.ollama_timeout_seconds
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)

        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise classify_upstream_error(exc, timeout_seconds=effective_timeout) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Ollama returned a non-JSON body for %s %s", method, path)
            raise UpstreamError(
                details={"path": path, "body": response.text[:1000]},
                cause=exc,
            ) from exc

    async def _require_client(self) -> httpx.AsyncClient:
        if self._closed:
            raise UpstreamError(
                "Ollama client is shut down",
                error_code="CLIENT_CLOSED",
            )
        if self._client is None:
            await self.startup()
        assert self._client is not None
        return self._client

"""Reachability and model availability checks against the Ollama server."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from chat_proxy.services.ollama import OllamaClient
from chat_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HealthStatus:
    """Result of a single health probe. Never cached."""

    overall: str
    upstream_reachable: bool
    model_available: bool
    model_name: str
    timestamp: str = field(default_factory=utc_timestamp)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": self.overall,
            "services": {
                "ollama": "connected" if self.upstream_reachable else "disconnected",
                "model": {
                    "name": self.model_name,
                    "status": "available" if self.model_available else "unavailable",
                },
            },
            "timestamp": self.timestamp,
        }


class HealthProber:
    """Answers "is the server up" and "is the right model loaded"."""

    def __init__(self, client: OllamaClient, model_name: str) -> None:
        self._client = client
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def is_reachable(self) -> None:
        """Raise the classified upstream error if Ollama cannot list its models."""
        await self._client.get_tags()

    async def check_connection(self) -> bool:
        """Return True only when the server answers and the model is installed.

        Failures are logged and folded into the result.
        """
        logger.info("Checking Ollama connection...")
        try:
            tags = await self._client.get_tags()
        except Exception as exc:
            logger.error("Failed to connect to Ollama: %s", exc)
            return False

        listed = tags.get("models") if isinstance(tags, dict) else None
        models = [m.get("name") for m in listed or [] if isinstance(m, dict)]
        logger.info("Connected to Ollama. Available models: %s", models)

        try:
            await self._client.show_model(self._model_name)
        except Exception as exc:
            logger.error("Model %s not found: %s", self._model_name, exc)
            return False

        logger.info("Model %s is available", self._model_name)
        return True

    async def compute_health(self) -> HealthStatus:
        """Probe reachability and model availability independently."""
        try:
            await self._client.get_tags()
            reachable = True
        except Exception as exc:
            logger.warning("Ollama reachability check failed: %s", exc)
            reachable = False

        try:
            await self._client.show_model(self._model_name)
            model_available = True
        except Exception as exc:
            logger.error("Model check failed: %s", exc)
            model_available = False

        return HealthStatus(
            overall="healthy",
            upstream_reachable=reachable,
            model_available=model_available,
            model_name=self._model_name,
        )

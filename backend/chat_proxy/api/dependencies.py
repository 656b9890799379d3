"""Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from chat_proxy.config.settings import Settings
from chat_proxy.services.health import HealthProber
from chat_proxy.services.ollama import OllamaClient


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    settings: Settings | None = getattr(request.app.state, "settings", None)
    if settings is None:
        raise HTTPException(status_code=500, detail="Application settings are not available")
    return settings


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from application state.

    Raises:
        HTTPException: If the client was never initialised
    """
    client: OllamaClient | None = getattr(request.app.state, "ollama_client", None)
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Ollama client is not available",
        )
    return client


def get_health_prober(request: Request) -> HealthProber:
    """Get the health prober from application state."""
    prober: HealthProber | None = getattr(request.app.state, "health_prober", None)
    if prober is None:
        raise HTTPException(
            status_code=503,
            detail="Health prober is not available",
        )
    return prober


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
OllamaClientDep = Annotated[OllamaClient, Depends(get_ollama_client)]
HealthProberDep = Annotated[HealthProber, Depends(get_health_prober)]

"""Pydantic models for the health endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ModelHealth(BaseModel):
    name: str
    status: Literal["available", "unavailable"]


class ServicesHealth(BaseModel):
    ollama: Literal["connected", "disconnected"]
    model: ModelHealth


class HealthResponse(BaseModel):
    """Body of ``GET /api/health``."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Status of the proxy itself")
    services: ServicesHealth
    timestamp: str

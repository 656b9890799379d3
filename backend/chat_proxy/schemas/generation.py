"""Pydantic models for the text generation endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """Request schema for text generation.

    Fields are loosely typed so that a missing, blank or mistyped value is
    answered with the proxy's own 400 payload rather than a schema error.
    """

    prompt: Any = Field(
        default=None,
        description="User text forwarded to the model",
        json_schema_extra={"type": "string"},
    )
    options: Any = Field(
        default=None,
        description="Sampling parameters merged over the server defaults",
        json_schema_extra={"type": "object"},
    )


class GenerationMetrics(BaseModel):
    """Timing and token counters reported by Ollama."""

    eval_count: Optional[int] = None
    eval_duration: Optional[int] = Field(default=None, description="Nanoseconds spent generating")
    total_duration: Optional[int] = Field(default=None, description="Nanoseconds for the whole call")


class RequestEcho(BaseModel):
    """What the proxy actually sent upstream."""

    prompt_length: int
    options_used: Dict[str, Any]


class GenerationResponse(BaseModel):
    """Response schema for text generation."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    response: str
    model: str
    created_at: str = Field(..., alias="createdAt")
    metrics: GenerationMetrics
    request: RequestEcho

"""Text generation endpoint proxied to Ollama."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter

from chat_proxy.api.dependencies import OllamaClientDep, SettingsDep
from chat_proxy.schemas.generation import (
    GenerationMetrics,
    GenerationRequest,
    GenerationResponse,
    RequestEcho,
)
from chat_proxy.utils.exceptions import UpstreamError, ValidationError
from chat_proxy.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])

DEFAULT_GENERATION_OPTIONS: Dict[str, Any] = {
    "temperature": 0.7,
    "top_p": 0.9,
    "repeat_penalty": 1.1,
}


def merge_options(
    defaults: Mapping[str, Any],
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Overlay caller options on the defaults.

    Caller values win on collisions; keys Ollama may understand but we don't
    know about are passed through untouched.
    """
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def _preview(prompt: str, limit: int = 50) -> str:
    return prompt[:limit] + ("..." if len(prompt) > limit else "")


@router.post(
    "/generate",
    response_model=GenerationResponse,
    summary="Generate a reply for a single prompt",
)
async def generate_text(
    payload: GenerationRequest,
    ollama: OllamaClientDep,
    settings: SettingsDep,
) -> GenerationResponse:
    """Forward a prompt to the configured model and return its reply.

    The model is fixed per deployment. Upstream failures propagate as proxy
    errors and are rendered by the error handler middleware:
    upstream HTTP errors keep their status, timeouts become 504, connection
    failures 503 and anything else 500.
    """
    prompt = payload.prompt
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError(
            "Prompt is required",
            details="The prompt parameter must be a non-empty string",
        )
    if payload.options is not None and not isinstance(payload.options, dict):
        raise ValidationError(
            "Invalid options",
            details="The options parameter must be an object",
        )

    model = settings.ollama_model
    options = merge_options(DEFAULT_GENERATION_OPTIONS, payload.options)
    logger.info("Processing prompt (%s): %s", model, _preview(prompt))

    request_data = {
        "model": model,
        "prompt": prompt,
        "stream": False,
        "options": options,
    }
    logger.debug("Sending request to Ollama: %s", request_data)

    data = await ollama.generate(request_data, timeout=settings.generate_timeout_seconds)

    text = data.get("response") if isinstance(data, dict) else None
    if not isinstance(text, str):
        raise UpstreamError(details={"reason": "Ollama reply has no 'response' field"})

    total_duration = data.get("total_duration")
    if isinstance(total_duration, (int, float)):
        logger.info("Response received in %.2fs", total_duration / 1e9)

    return GenerationResponse(
        response=text,
        model=model,
        created_at=utc_timestamp(),
        metrics=GenerationMetrics(
            eval_count=data.get("eval_count"),
            eval_duration=data.get("eval_duration"),
            total_duration=total_duration,
        ),
        request=RequestEcho(
            prompt_length=len(prompt),
            options_used=options,
        ),
    )

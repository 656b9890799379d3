"""Exception hierarchy for the chat proxy and upstream error classification."""

from __future__ import annotations

from typing import Any, Optional

import httpx

GENERIC_ERROR_MESSAGE = "Error processing your request"


class ChatProxyError(Exception):
    """Base exception for every error the proxy reports to its clients.

    Attributes:
        message: Human-readable error message
        error_code: Unique error code for programmatic handling
        status_code: HTTP status the error is rendered with
        details: Additional context (usually a dict), only exposed outside
            production unless ``public_details`` is set
    """

    status_code: int = 500
    public_details: bool = False

    def __init__(
        self,
        message: str = GENERIC_ERROR_MESSAGE,
        error_code: str = "INTERNAL_ERROR",
        details: Any = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class ValidationError(ChatProxyError):
    """Raised when an inbound request is rejected before reaching the upstream."""

    status_code = 400
    public_details = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Any = None,
    ) -> None:
        if field and details is None:
            details = {"field": field}
        elif field and isinstance(details, dict):
            details = {**details, "field": field}

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class UpstreamError(ChatProxyError):
    """Raised when a call to the Ollama server fails for an unclassified reason."""

    def __init__(
        self,
        message: str = GENERIC_ERROR_MESSAGE,
        error_code: str = "UPSTREAM_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = dict(details or {})
        if cause is not None:
            details.setdefault("message", str(cause))
            details.setdefault("code", type(cause).__name__)
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            status_code=status_code,
        )
        self.__cause__ = cause


class UpstreamHTTPError(UpstreamError):
    """Raised when Ollama answers with a non-success HTTP status.

    The upstream status is passed through to the client unchanged.
    """

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        body: Any = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if isinstance(body, dict):
            details.update(body)
        elif body:
            details["body"] = body
        super().__init__(
            message=message or GENERIC_ERROR_MESSAGE,
            error_code="UPSTREAM_HTTP_ERROR",
            details=details,
            status_code=status_code,
            cause=cause,
        )
        self.body = body


class UpstreamTimeoutError(UpstreamError):
    """Raised when Ollama does not answer before the request deadline."""

    status_code = 504

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message="Request timeout - Ollama is taking too long to respond",
            error_code="UPSTREAM_TIMEOUT",
            details=details,
            cause=cause,
        )
        self.timeout_seconds = timeout_seconds


class UpstreamUnavailableError(UpstreamError):
    """Raised when the Ollama host refuses the connection or cannot be resolved."""

    status_code = 503

    def __init__(self, cause: Optional[Exception] = None) -> None:
        super().__init__(
            message="Ollama service is unavailable",
            error_code="UPSTREAM_UNAVAILABLE",
            cause=cause,
        )


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def classify_upstream_error(
    exc: Exception,
    timeout_seconds: Optional[float] = None,
) -> UpstreamError:
    """Translate an httpx failure into the matching proxy error.

    Precedence: HTTP error response, deadline exceeded, connection failure,
    anything else.
    """
    if isinstance(exc, UpstreamError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        body = _response_body(exc.response)
        message = None
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            message = body["error"]
        return UpstreamHTTPError(
            status_code=exc.response.status_code,
            message=message,
            body=body,
            cause=exc,
        )

    if isinstance(exc, httpx.TimeoutException):
        return UpstreamTimeoutError(timeout_seconds, cause=exc)

    if isinstance(exc, httpx.ConnectError):
        return UpstreamUnavailableError(cause=exc)

    return UpstreamError(cause=exc)

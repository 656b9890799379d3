"""Utility modules for the application."""

from chat_proxy.utils.exceptions import (
    ChatProxyError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    ValidationError,
    classify_upstream_error,
)

__all__ = [
    "ChatProxyError",
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
    "ValidationError",
    "classify_upstream_error",
]

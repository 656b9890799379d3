"""ASGI middleware."""

from chat_proxy.middleware.error_handler import ErrorHandlerMiddleware
from chat_proxy.middleware.gateway import OllamaGatewayMiddleware

__all__ = ["ErrorHandlerMiddleware", "OllamaGatewayMiddleware"]

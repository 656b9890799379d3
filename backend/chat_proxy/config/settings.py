"""Application settings loaded from the environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FRONTEND_BUILD_DIR = Path(__file__).resolve().parents[3] / "frontend" / "build"


class Settings(BaseSettings):
    """Immutable deployment configuration.

    Built once at startup and handed to every component explicitly; nothing
    else in the package reads process environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Interface the API server binds to")
    port: int = Field(default=5000, ge=1, le=65535, description="Listen port")
    node_env: str = Field(
        default="development",
        description="Deployment environment; 'production' hides error details and serves the frontend",
    )
    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5000",
            "http://frontend:3000",
        ]
    )

    # Upstream inference server
    ollama_host: str = Field(default="http://ollama:11434", description="Base URL of the Ollama server")
    ollama_model: str = Field(default="qwen2.5:7b", description="Model served to every client")
    ollama_timeout_seconds: float = Field(default=300.0, gt=0)
    generate_timeout_seconds: float = Field(default=120.0, gt=0)

    # Frontend
    frontend_build_dir: Path = Field(default=DEFAULT_FRONTEND_BUILD_DIR)

    # Documentation
    api_title: str = "Ollama Chat Proxy"
    api_version: str = "1.0.0"
    docs_url: str = "/docs"
    openapi_url: str = "/openapi.json"
    use_scalar_docs: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @field_validator("node_env")
    @classmethod
    def _normalise_node_env(cls, value: str) -> str:
        return value.strip().lower() or "development"

    @field_validator("ollama_host")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def debug_errors(self) -> bool:
        """Whether error payloads may carry internal details."""
        return not self.is_production


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

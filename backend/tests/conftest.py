"""
Shared pytest fixtures and configuration for the chat proxy test suite.

This module provides a fake Ollama client, settings, test clients and small
helpers used across all test modules.
"""

import os
import sys
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio

# Ensure backend package is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test-specific environment variables BEFORE importing app modules
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["NODE_ENV"] = "test"

from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from chat_proxy.config.settings import Settings
from chat_proxy.services.health import HealthProber
from chat_proxy.utils.exceptions import UpstreamUnavailableError


TEST_MODEL = "qwen2.5:7b"


# ============================================================================
# Settings Fixtures
# ============================================================================

def create_test_settings(**kwargs: Any) -> Settings:
    """Create Settings instance for tests, bypassing env file loading."""
    values: Dict[str, Any] = {
        "log_level": "DEBUG",
        "node_env": "development",
        "ollama_host": "http://ollama.test:11434",
        "ollama_model": TEST_MODEL,
    }
    values.update(kwargs)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


@pytest.fixture
def test_settings() -> Settings:
    """Development settings: error payloads carry details."""
    return create_test_settings()


@pytest.fixture
def production_settings(tmp_path: Path) -> Settings:
    """Production settings without a frontend build on disk."""
    return create_test_settings(
        node_env="production",
        frontend_build_dir=tmp_path / "missing-build",
    )


# ============================================================================
# Fake Ollama Client
# ============================================================================

DEFAULT_GENERATE_RESULT: Dict[str, Any] = {
    "model": TEST_MODEL,
    "response": "hi",
    "done": True,
    "eval_count": 5,
    "eval_duration": 100,
    "total_duration": 500,
}


class FakeOllamaClient:
    """Stands in for OllamaClient without any network traffic.

    Each ``*_error`` attribute, when set, is raised by the matching call.
    """

    def __init__(
        self,
        *,
        tags_error: Optional[Exception] = None,
        show_error: Optional[Exception] = None,
        generate_error: Optional[Exception] = None,
        generate_result: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.tags_error = tags_error
        self.show_error = show_error
        self.generate_error = generate_error
        self.generate_result = dict(generate_result or DEFAULT_GENERATE_RESULT)
        self.tags_calls = 0
        self.show_calls: List[str] = []
        self.generate_calls: List[Tuple[Dict[str, Any], Optional[float]]] = []
        self._ready = True

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def model_name(self) -> str:
        return TEST_MODEL

    async def startup(self) -> None:
        self._ready = True

    async def shutdown(self) -> None:
        self._ready = False

    async def get_tags(self) -> Dict[str, Any]:
        self.tags_calls += 1
        if self.tags_error is not None:
            raise self.tags_error
        return {"models": [{"name": TEST_MODEL}, {"name": "llama3:8b"}]}

    async def show_model(self, name: str) -> Dict[str, Any]:
        self.show_calls.append(name)
        if self.show_error is not None:
            raise self.show_error
        return {"modelfile": "FROM qwen2.5:7b", "details": {"family": "qwen2"}}

    async def generate(
        self,
        payload: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        self.generate_calls.append((payload, timeout))
        if self.generate_error is not None:
            raise self.generate_error
        return self.generate_result

    def go_down(self) -> None:
        """Make every call fail as if the server refused connections."""
        self.tags_error = UpstreamUnavailableError()
        self.show_error = UpstreamUnavailableError()
        self.generate_error = UpstreamUnavailableError()


@pytest.fixture
def fake_ollama() -> FakeOllamaClient:
    """Provide a healthy fake Ollama client."""
    return FakeOllamaClient()


# ============================================================================
# Application Fixtures
# ============================================================================

def build_app(settings: Settings, ollama: FakeOllamaClient) -> FastAPI:
    """Create an app wired to ``ollama`` without running the lifespan."""
    from chat_proxy.main import create_app

    application = create_app(settings=settings)
    application.state.ollama_client = ollama
    application.state.health_prober = HealthProber(ollama, settings.ollama_model)
    return application


@pytest.fixture
def app(test_settings: Settings, fake_ollama: FakeOllamaClient) -> FastAPI:
    """Create a test FastAPI app backed by the fake Ollama client."""
    return build_app(test_settings, fake_ollama)


@pytest.fixture
def make_app(fake_ollama: FakeOllamaClient) -> Callable[..., FastAPI]:
    """Factory for apps with custom settings, sharing the fake Ollama client."""

    def _make(**settings_overrides: Any) -> FastAPI:
        return build_app(create_test_settings(**settings_overrides), fake_ollama)

    return _make


@pytest.fixture
def production_app(production_settings: Settings, fake_ollama: FakeOllamaClient) -> FastAPI:
    """Same as ``app`` but with NODE_ENV=production."""
    return build_app(production_settings, fake_ollama)


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create a synchronous test client."""
    return TestClient(app)


@pytest.fixture
def production_client(production_app: FastAPI) -> TestClient:
    return TestClient(production_app)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Create an async test client for async endpoint testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

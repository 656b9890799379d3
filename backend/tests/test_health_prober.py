"""
Unit tests for the health prober service.
"""

import pytest

from chat_proxy.services.health import HealthProber, HealthStatus
from chat_proxy.utils.exceptions import UpstreamHTTPError, UpstreamUnavailableError


@pytest.fixture
def prober(fake_ollama) -> HealthProber:
    return HealthProber(fake_ollama, "qwen2.5:7b")


# ============================================================================
# check_connection Tests
# ============================================================================

class TestCheckConnection:
    """Test the startup connection check."""

    @pytest.mark.asyncio
    async def test_true_when_server_and_model_answer(self, prober, fake_ollama) -> None:
        assert await prober.check_connection() is True
        assert fake_ollama.tags_calls == 1
        assert fake_ollama.show_calls == ["qwen2.5:7b"]

    @pytest.mark.asyncio
    async def test_false_when_server_unreachable(self, prober, fake_ollama) -> None:
        fake_ollama.tags_error = UpstreamUnavailableError()

        assert await prober.check_connection() is False
        assert fake_ollama.show_calls == []

    @pytest.mark.asyncio
    async def test_false_when_model_missing(self, prober, fake_ollama) -> None:
        fake_ollama.show_error = UpstreamHTTPError(404, message="model not found")

        assert await prober.check_connection() is False

    @pytest.mark.asyncio
    async def test_never_raises(self, prober, fake_ollama) -> None:
        fake_ollama.tags_error = RuntimeError("unexpected")

        assert await prober.check_connection() is False


# ============================================================================
# compute_health Tests
# ============================================================================

class TestComputeHealth:
    """Test the tri-state health probe."""

    @pytest.mark.asyncio
    async def test_all_good(self, prober) -> None:
        status = await prober.compute_health()

        assert status.overall == "healthy"
        assert status.upstream_reachable is True
        assert status.model_available is True
        assert status.model_name == "qwen2.5:7b"

    @pytest.mark.asyncio
    async def test_model_checked_even_if_tags_fail(self, prober, fake_ollama) -> None:
        """A failing reachability check does not skip the model check."""
        fake_ollama.tags_error = UpstreamUnavailableError()

        status = await prober.compute_health()

        assert fake_ollama.show_calls == ["qwen2.5:7b"]
        assert status.upstream_reachable is False
        assert status.model_available is True

    @pytest.mark.asyncio
    async def test_model_unavailable(self, prober, fake_ollama) -> None:
        fake_ollama.show_error = UpstreamHTTPError(404, message="model not found")

        status = await prober.compute_health()

        assert status.upstream_reachable is True
        assert status.model_available is False

    @pytest.mark.asyncio
    async def test_recomputed_on_every_call(self, prober, fake_ollama) -> None:
        first = await prober.compute_health()
        fake_ollama.go_down()
        second = await prober.compute_health()

        assert first.upstream_reachable is True
        assert second.upstream_reachable is False
        assert fake_ollama.tags_calls == 2

    @pytest.mark.asyncio
    async def test_is_reachable_raises_classified_error(self, prober, fake_ollama) -> None:
        fake_ollama.tags_error = UpstreamUnavailableError()

        with pytest.raises(UpstreamUnavailableError):
            await prober.is_reachable()


# ============================================================================
# HealthStatus Payload Tests
# ============================================================================

class TestHealthStatusPayload:
    """Test rendering of the /api/health body."""

    def test_payload_when_connected(self) -> None:
        status = HealthStatus(
            overall="healthy",
            upstream_reachable=True,
            model_available=True,
            model_name="qwen2.5:7b",
            timestamp="2024-01-01T00:00:00.000Z",
        )

        assert status.to_payload() == {
            "status": "healthy",
            "services": {
                "ollama": "connected",
                "model": {"name": "qwen2.5:7b", "status": "available"},
            },
            "timestamp": "2024-01-01T00:00:00.000Z",
        }

    def test_payload_when_disconnected(self) -> None:
        status = HealthStatus(
            overall="healthy",
            upstream_reachable=False,
            model_available=False,
            model_name="qwen2.5:7b",
        )
        payload = status.to_payload()

        assert payload["services"]["ollama"] == "disconnected"
        assert payload["services"]["model"]["status"] == "unavailable"
        assert payload["timestamp"].endswith("Z")

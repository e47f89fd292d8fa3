"""Tests for the composition root."""

from datetime import timedelta

import pytest

from beer_service.config import Settings
from beer_service.main import BeerService
from beer_service.resilience import CircuitBreakerState


@pytest.fixture(autouse=True)
def keep_default_logging(monkeypatch):
    # structlog stays at its defaults so capture_logs works in other modules
    monkeypatch.setattr("beer_service.main.configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def settings(unused_tcp_port):
    return Settings(**{
        "server": {"host": "127.0.0.1", "port": unused_tcp_port, "emit-delay": "0s"},
        "beers": {
            "url": f"http://127.0.0.1:{unused_tcp_port}/beers",
            "poller-enabled": False,
            "retry": {"attempts": 2, "delay": "0s"},
            "circuit-breaker": {"attempts": 4, "delay": "0s", "reset": "1m"},
        },
    })


class TestBeerService:

    def test_wires_components_from_settings(self, settings):
        service = BeerService(settings)

        assert len(service.catalog) == 3
        assert service.api.catalog is service.catalog
        assert service.poller.client is service.client
        assert service.poller.retry.max_retries == 2
        assert service.breaker.config.failure_threshold == 4
        assert service.breaker.config.reset_timeout == timedelta(minutes=1)
        assert service.scheduler.fixed_delay == 5.0

    def test_seed_can_be_disabled(self, settings):
        settings.server.seed_demo_data = False

        assert len(BeerService(settings).catalog) == 0

    @pytest.mark.asyncio
    async def test_polls_its_own_catalog(self, settings, beers):
        service = BeerService(settings)
        await service.start()
        try:
            assert service.running is True
            assert await service.poller.fetch() == beers
            assert service.poller.state.circuit_state == CircuitBreakerState.CLOSED
        finally:
            await service.stop()

        assert service.running is False

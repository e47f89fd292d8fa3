"""Pytest fixtures for Beer Service tests."""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

from beer_service.catalog import BeerCatalog
from beer_service.client import BeersClient, BeersClientError
from beer_service.models import Beer
from beer_service.resilience import CircuitBreaker, CircuitBreakerConfig, RetryConfig


class FakeClock:
    """Manually advanced replacement for datetime.now."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def beers():
    return (
        Beer(id=1, name="Luzerner Bier", brewery="Brauerei Luzern AG"),
        Beer(id=2, name="Lozärner Bier", brewery="Lozärner Bier AG"),
        Beer(id=3, name="Urbräu", brewery="Tavolago AG"),
    )


@pytest.fixture
def catalog():
    return BeerCatalog()


@pytest.fixture
def mock_beers_client():
    client = AsyncMock(spec=BeersClient)
    client.url = "http://beers.test/beers"
    client.fetch_beers = AsyncMock(side_effect=BeersClientError("connection refused"))
    return client


@pytest.fixture
def breaker(clock):
    config = CircuitBreakerConfig(
        failure_threshold=3,
        reset_timeout=timedelta(minutes=10),
    )
    return CircuitBreaker("test-beers", config, clock=clock)


@pytest.fixture
def fast_retry():
    return RetryConfig(max_retries=3, initial_delay=0, max_delay=0, multiplier=2)

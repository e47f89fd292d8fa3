"""Periodic fetch of a remote beer catalog with retry, circuit breaker and fallback."""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
import structlog

from .client import BeersClient
from .models import Beer
from .observability import get_metrics, get_tracer
from .resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitBreakerState,
    RetryConfig,
    with_retry,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class PollerState:
    circuit_state: CircuitBreakerState
    consecutive_failures: int
    last_attempt_at: Optional[datetime]


class BeerPoller:
    """Fetches the remote catalog through a circuit breaker.

    While the breaker is closed a fetch may take up to ``retry.max_retries``
    attempts; a half-open breaker gets exactly one trial attempt. Whenever no
    beers could be fetched the fallback (an empty tuple) is returned.
    """

    def __init__(
        self,
        client: BeersClient,
        breaker: CircuitBreaker,
        retry: RetryConfig,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.breaker = breaker
        self.retry = retry
        self._clock = clock
        self._last_attempt_at: Optional[datetime] = None

    @property
    def state(self) -> PollerState:
        return PollerState(
            circuit_state=self.breaker.state,
            consecutive_failures=self.breaker.failure_count,
            last_attempt_at=self._last_attempt_at,
        )

    async def fetch(self) -> tuple[Beer, ...]:
        with get_tracer().start_as_current_span("beers.poll") as span:
            current_state = await self.breaker.current_state()
            if current_state == CircuitBreakerState.OPEN:
                span.set_attribute("beers.poll.outcome", "circuit_open")
                return self._fallback("circuit_open")

            retry = self.retry
            if current_state == CircuitBreakerState.HALF_OPEN:
                retry = RetryConfig(
                    max_retries=1,
                    initial_delay=self.retry.initial_delay,
                    max_delay=self.retry.max_delay,
                    multiplier=self.retry.multiplier,
                )

            self._last_attempt_at = self._clock()
            try:
                beers = await self.breaker.call(
                    with_retry, "fetch_beers", self.client.fetch_beers, config=retry
                )
            except CircuitBreakerOpenError:
                span.set_attribute("beers.poll.outcome", "circuit_open")
                return self._fallback("circuit_open")
            except Exception as e:
                span.set_attribute("beers.poll.outcome", "retries_exhausted")
                return self._fallback("retries_exhausted", error=str(e))

            span.set_attribute("beers.poll.outcome", "success")
            span.set_attribute("beers.poll.count", len(beers))

        metrics = get_metrics()
        metrics.poll_total.labels(outcome="success").inc()
        metrics.beers_received.inc(len(beers))
        for beer in beers:
            logger.info("beer_received", id=beer.id, name=beer.name, brewery=beer.brewery)
        logger.info("beers_fetched", count=len(beers), url=self.client.url)
        return beers

    def _fallback(self, reason: str, **context) -> tuple[Beer, ...]:
        get_metrics().poll_total.labels(outcome="fallback").inc()
        logger.info(
            "beers_fallback_invoked",
            reason=reason,
            circuit_state=self.breaker.state.value,
            failures=self.breaker.failure_count,
            **context,
        )
        return ()

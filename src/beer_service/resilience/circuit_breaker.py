"""Circuit Breaker Implementation for Python."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, TypeVar, Optional
import structlog

from ..observability.metrics import get_metrics

logger = structlog.get_logger()

T = TypeVar("T")


class CircuitBreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5
    reset_timeout: timedelta = timedelta(minutes=10)
    half_open_max_calls: int = 1


class CircuitBreakerOpenError(Exception):
    """Raised when circuit breaker is open."""
    pass


class CircuitBreaker:
    """Circuit breaker for async functions.

    The breaker counts failed calls, not failed attempts: a call that retries
    internally and finally gives up is a single failure. Once
    ``failure_threshold`` consecutive calls have failed the breaker opens and
    rejects calls until ``reset_timeout`` has elapsed, after which a limited
    number of trial calls are let through (half-open). A successful trial call
    closes the breaker, a failed one opens it again and restarts the timer.
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        self._half_open_calls = 0
        self._opened_at: Optional[datetime] = None
        self._lock = asyncio.Lock()
        self._update_metric()

    @property
    def state(self) -> CircuitBreakerState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def opened_at(self) -> Optional[datetime]:
        return self._opened_at

    async def current_state(self) -> CircuitBreakerState:
        """Return the state, moving Open to Half-Open once the reset timeout has passed."""
        async with self._lock:
            if self._state == CircuitBreakerState.OPEN:
                if self._opened_at and \
                   self._clock() - self._opened_at >= self.config.reset_timeout:
                    self._state = CircuitBreakerState.HALF_OPEN
                    self._half_open_calls = 0
                    self._update_metric()
                    logger.info("circuit_breaker_half_open", name=self.name)
            return self._state

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Execute function with circuit breaker protection."""
        current_state = await self.current_state()

        if current_state == CircuitBreakerState.OPEN:
            raise CircuitBreakerOpenError(f"Circuit breaker {self.name} is open")

        if current_state == CircuitBreakerState.HALF_OPEN:
            async with self._lock:
                if self._half_open_calls >= self.config.half_open_max_calls:
                    raise CircuitBreakerOpenError(f"Circuit breaker {self.name} half-open limit reached")
                self._half_open_calls += 1

        try:
            result = await func(*args, **kwargs)
        except Exception:
            await self._on_failure()
            raise
        await self._on_success()
        return result

    async def _on_success(self) -> None:
        async with self._lock:
            if self._state != CircuitBreakerState.CLOSED:
                logger.info("circuit_breaker_closed", name=self.name)
            self._state = CircuitBreakerState.CLOSED
            self._failure_count = 0
            self._half_open_calls = 0
            self._opened_at = None
            self._update_metric()

    async def _on_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1

            if self._state == CircuitBreakerState.CLOSED:
                if self._failure_count >= self.config.failure_threshold:
                    self._open()
                    logger.warning("circuit_breaker_opened", name=self.name, failures=self._failure_count)
            elif self._state == CircuitBreakerState.HALF_OPEN:
                self._open()
                logger.warning("circuit_breaker_reopened", name=self.name, failures=self._failure_count)

    def _open(self) -> None:
        self._state = CircuitBreakerState.OPEN
        self._opened_at = self._clock()
        self._half_open_calls = 0
        self._update_metric()

    def _update_metric(self) -> None:
        value = {
            CircuitBreakerState.CLOSED: 0,
            CircuitBreakerState.HALF_OPEN: 0.5,
            CircuitBreakerState.OPEN: 1,
        }[self._state]
        get_metrics().circuit_breaker_state.labels(name=self.name).set(value)

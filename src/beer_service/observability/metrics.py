"""Prometheus Metrics for Beer Service."""

from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest

# Global registry
REGISTRY = CollectorRegistry()

# Catalog metrics
catalog_size = Gauge(
    "beer_service_catalog_size",
    "Number of beers in the catalog",
    registry=REGISTRY,
)

# Poller metrics
poll_total = Counter(
    "beer_service_poll_total",
    "Beer polls by outcome",
    ["outcome"],
    registry=REGISTRY,
)

beers_received = Counter(
    "beer_service_beers_received_total",
    "Beers received from the remote catalog",
    registry=REGISTRY,
)

# Resilience metrics
circuit_breaker_state = Gauge(
    "beer_service_circuit_breaker_state",
    "Circuit breaker state",
    ["name"],
    registry=REGISTRY,
)

retry_attempts = Counter(
    "beer_service_retry_attempts_total",
    "Retry attempts",
    ["operation", "outcome"],
    registry=REGISTRY,
)


class BeerServiceMetrics:
    """Metrics accessor class."""

    catalog_size = catalog_size
    poll_total = poll_total
    beers_received = beers_received
    circuit_breaker_state = circuit_breaker_state
    retry_attempts = retry_attempts


_metrics = BeerServiceMetrics()


def init_metrics() -> BeerServiceMetrics:
    """Initialize metrics."""
    return _metrics


def get_metrics() -> BeerServiceMetrics:
    """Get metrics instance."""
    return _metrics


def render_latest() -> bytes:
    """Prometheus exposition of the service registry."""
    return generate_latest(REGISTRY)

"""Beer Service main entry point."""

import asyncio
import signal
import sys
from typing import Optional

import structlog

from .api import BeerApi
from .catalog import BeerCatalog
from .client import BeersClient
from .config import ConfigurationError, Settings, get_settings
from .observability import init_tracing, init_metrics, configure_logging
from .poller import BeerPoller
from .resilience import CircuitBreaker, CircuitBreakerConfig, RetryConfig
from .scheduler import FixedDelayScheduler


class BeerService:
    """Composition root: builds and wires every component explicitly."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.running = False

        # Observability
        configure_logging(
            self.settings.service_name,
            self.settings.logging.level,
            self.settings.logging.format,
        )
        init_tracing(self.settings.service_name, self.settings.tracing.otlp_endpoint)
        init_metrics()
        self.logger = structlog.get_logger()

        # Catalog and HTTP surface
        server = self.settings.server
        self.catalog = BeerCatalog.with_demo_data() if server.seed_demo_data else BeerCatalog()
        self.api = BeerApi(
            self.catalog,
            host=server.host,
            port=server.port,
            emit_delay=server.emit_delay.total_seconds(),
        )

        # Resilient poller
        beers = self.settings.beers
        self.client = BeersClient(beers.url, timeout=beers.timeout.total_seconds())
        self.breaker = CircuitBreaker(
            "beers",
            CircuitBreakerConfig(
                failure_threshold=beers.circuit_breaker.attempts,
                reset_timeout=beers.circuit_breaker.reset,
            ),
        )
        self.poller = BeerPoller(
            self.client,
            self.breaker,
            RetryConfig(
                max_retries=beers.retry.attempts,
                initial_delay=beers.retry.delay.total_seconds(),
                max_delay=beers.circuit_breaker.delay.total_seconds(),
                multiplier=beers.circuit_breaker.multiplier,
            ),
        )
        self.scheduler = FixedDelayScheduler(
            "beers_poll",
            self.poller.fetch,
            initial_delay=beers.initial_delay.total_seconds(),
            fixed_delay=beers.fixed_delay.total_seconds(),
        )

    async def start(self):
        self.logger.info("starting_beer_service")

        await self.api.start()
        self.logger.info("http_server_started", host=self.api.host, port=self.api.port)

        if self.settings.beers.poller_enabled:
            self.scheduler.start()

        self.logger.info("beer_service_started")
        self.running = True
        self.api.set_healthy(True)

    async def stop(self):
        self.logger.info("stopping_beer_service")
        self.running = False
        self.api.set_healthy(False)
        await self.scheduler.stop()
        await self.client.close()
        await self.api.stop()
        self.logger.info("beer_service_stopped")


async def main():
    try:
        service = BeerService()
    except ConfigurationError as e:
        structlog.get_logger().error("configuration_error", error=str(e))
        sys.exit(1)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(service.stop()))

    await service.start()

    while service.running:
        await asyncio.sleep(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()

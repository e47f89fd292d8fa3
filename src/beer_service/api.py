"""HTTP surface for the beer catalog."""

import json
from typing import Optional

from aiohttp import web
import structlog

from .catalog import BeerCatalog
from .emitter import SlowEmitter
from .models import Beer, BeerDecodeError
from .observability import render_latest

logger = structlog.get_logger()


class BeerApi:
    """HTTP server for the catalog plus metrics and health endpoints."""

    def __init__(
        self,
        catalog: BeerCatalog,
        host: str = "0.0.0.0",
        port: int = 8080,
        emit_delay: float = 1.0,
    ):
        self.catalog = catalog
        self.host = host
        self.port = port
        self.emit_delay = emit_delay
        self.app = web.Application()
        self.app.router.add_get("/beers", self.list_beers)
        self.app.router.add_post("/beers", self.add_beer)
        self.app.router.add_get("/metrics", self.metrics_handler)
        self.app.router.add_get("/health", self.health_handler)
        self._healthy = True
        self._runner: Optional[web.AppRunner] = None

    async def list_beers(self, request: web.Request) -> web.StreamResponse:
        """Stream the catalog as a JSON array, one beer at a time."""
        emitter = SlowEmitter(self.catalog.list(), delay=self.emit_delay)
        response = web.StreamResponse(headers={"Content-Type": "application/json"})
        await response.prepare(request)

        try:
            await response.write(b"[")
            async for beer in emitter:
                separator = b"," if emitter.produced > 1 else b""
                await response.write(separator + json.dumps(beer.to_dict()).encode())
            await response.write(b"]")
        finally:
            if not emitter.completed:
                emitter.cancel()
                logger.info("beers_stream_cancelled", produced=emitter.produced)

        await response.write_eof()
        return response

    async def add_beer(self, request: web.Request) -> web.Response:
        try:
            payload = await request.json()
        except ValueError as e:
            return web.json_response({"error": f"Invalid JSON: {e}"}, status=400)

        try:
            beer = Beer.from_dict(payload)
        except BeerDecodeError as e:
            return web.json_response({"error": str(e)}, status=400)

        self.catalog.append(beer)
        logger.info("beer_added", id=beer.id, name=beer.name, brewery=beer.brewery)
        return web.Response(status=200)

    async def metrics_handler(self, request: web.Request) -> web.Response:
        return web.Response(
            body=render_latest(),
            content_type="text/plain",
        )

    async def health_handler(self, request: web.Request) -> web.Response:
        if self._healthy:
            return web.json_response({"status": "healthy"})
        return web.json_response({"status": "unhealthy"}, status=503)

    def set_healthy(self, healthy: bool) -> None:
        self._healthy = healthy

    async def start(self) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

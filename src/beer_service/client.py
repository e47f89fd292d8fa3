"""HTTP client for a remote beer catalog."""

import asyncio
from typing import Optional

import aiohttp

from .models import Beer, BeerDecodeError, decode_beers


class BeersClientError(Exception):
    """A single fetch of the remote catalog failed."""
    pass


class BeersClient:
    """Fetches ``GET <url>`` and decodes the JSON array of beers."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def fetch_beers(self) -> tuple[Beer, ...]:
        session = await self._get_session()
        try:
            async with session.get(self.url) as response:
                if response.status >= 300:
                    raise BeersClientError(f"GET {self.url} returned HTTP {response.status}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BeersClientError(f"GET {self.url} failed: {e!r}") from e
        except ValueError as e:
            raise BeersClientError(f"GET {self.url} returned invalid JSON: {e}") from e

        try:
            return decode_beers(payload)
        except BeerDecodeError as e:
            raise BeersClientError(f"GET {self.url} returned an unexpected payload: {e}") from e

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

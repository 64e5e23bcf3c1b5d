from typing import List, Optional
import logging
import os

import httpx
from pydantic import TypeAdapter, ValidationError

from radiofeed.errors import DecodeError, NetworkError
from radiofeed.models import Country, Station

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 100

USER_AGENT = os.getenv("RADIOFEED_USER_AGENT", "radiofeed/1.0")
TIMEOUT = float(os.getenv("RADIOFEED_TIMEOUT", "15"))

_countries = TypeAdapter(List[Country])
_stations = TypeAdapter(List[Station])


def _decode(adapter: TypeAdapter, payload: bytes, url: Optional[str]):
    try:
        return adapter.validate_json(payload)
    except ValidationError as exc:
        raise DecodeError(str(exc), payload, url) from exc


def decode_countries(payload: bytes, url: Optional[str] = None) -> List[Country]:
    return _decode(_countries, payload, url)


def decode_stations(payload: bytes, url: Optional[str] = None) -> List[Station]:
    return _decode(_stations, payload, url)


def countries_url(base: str) -> str:
    return f"{base}/json/countries"


def stations_url(base: str, code: str, order: str) -> str:
    return str(httpx.URL(f"{base}/json/stations/bycountrycodeexact/{code}", params={"order": order}))


def search_url(base: str, query: str) -> str:
    return str(httpx.URL(f"{base}/json/stations/search", params={"name": query, "limit": SEARCH_LIMIT}))


class RadioBrowserClient:
    """Thin transport over one Radio Browser mirror.

    ``fetch`` is the only place that touches the network. Everything above it
    works on bytes, so tests swap in an ``httpx.MockTransport``.
    """

    source_name = "radio_browser_api"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = TIMEOUT):
        self._transport = transport
        self._timeout = timeout

    async def fetch(self, url: str) -> bytes:
        logger.debug("[%s] GET %s", self.source_name, url)
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                resp = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(url, f"Request failed: {exc}") from exc

        if not resp.is_success:
            raise NetworkError(url, f"HTTP {resp.status_code}", status=resp.status_code)
        return resp.content

    async def countries(self, base: str) -> List[Country]:
        url = countries_url(base)
        countries = decode_countries(await self.fetch(url), url)
        logger.info("[%s] Parsed %d countries.", self.source_name, len(countries))
        return countries

    async def stations_by_country(self, base: str, code: str, order: str) -> List[Station]:
        url = stations_url(base, code, order)
        stations = decode_stations(await self.fetch(url), url)
        logger.info("[%s] Parsed %d stations for %s.", self.source_name, len(stations), code)
        return stations

    async def search(self, base: str, query: str) -> List[Station]:
        url = search_url(base, query)
        return decode_stations(await self.fetch(url), url)

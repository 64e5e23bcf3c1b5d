"""Home and search feeds built on top of the directory service.

The home feed has two levels. Countries are fetched when the feed loads; a
country's stations are only fetched, and grouped, once that country is opened.
Every listing sits behind a ``PageProvider`` so the work of building it happens
when the consumer asks for the page, not when the tree is handed over.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar, Union
import logging

from radiofeed import grouping, streams
from radiofeed.config import CountryOrder, FeedConfig
from radiofeed.database import SettingsStore
from radiofeed.errors import RadioFeedError, UnsupportedOperation
from radiofeed.models import Country, PlayableSource, Station, StreamDescriptor
from radiofeed.parsers.radio_browser import RadioBrowserClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    next_token: Optional[str] = None


class PageProvider(Generic[T]):
    """Deferred single-page listing.

    The directory answers with a whole list per request, so there is only ever
    one page; what is deferred is the computation, not the network.
    """

    def __init__(self, compute: Callable[..., List[T]], *inputs: Any):
        self._compute = compute
        self._inputs = inputs

    def load_page(self, token: Optional[str] = None) -> Page[T]:
        if token is not None:
            return Page(items=[])
        return Page(items=self._compute(*self._inputs))

    @classmethod
    def empty(cls) -> "PageProvider[T]":
        return cls(list)


@dataclass(frozen=True)
class StationEntry:
    id: str
    title: str
    cover: str
    source: StreamDescriptor


@dataclass(frozen=True)
class CategoryEntry:
    key: str
    title: str
    count: int
    items: PageProvider[StationEntry] = field(compare=False)


@dataclass(frozen=True)
class CountryEntry:
    code: str
    title: str


@dataclass(frozen=True)
class Radio:
    id: str
    title: str


class FeedState(str, Enum):
    UNREQUESTED = "unrequested"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class FeedLoad(Generic[T]):
    """One feed request. READY and FAILED are final; start a new one to retry."""

    def __init__(self, producer: Callable[[], Awaitable[T]]):
        self._producer = producer
        self.state = FeedState.UNREQUESTED
        self.data: Optional[T] = None
        self.error: Optional[RadioFeedError] = None

    async def run(self) -> "FeedLoad[T]":
        if self.state is not FeedState.UNREQUESTED:
            raise RuntimeError(f"Feed load already {self.state.value}")
        self.state = FeedState.LOADING
        try:
            self.data = await self._producer()
        except RadioFeedError as exc:
            logger.error("Feed load failed: %s", exc)
            self.error = exc
            self.state = FeedState.FAILED
        except BaseException:
            # not ours to report; still leave the load in a final state
            self.state = FeedState.FAILED
            raise
        else:
            self.state = FeedState.READY
        return self


def dedupe_countries(countries: List[Country]) -> List[Country]:
    seen = set()
    out = []
    for country in countries:
        code = country.code.lower()
        if code in seen:
            continue
        seen.add(code)
        out.append(country)
    return out


def order_countries(countries: List[Country], default: Optional[str], order: CountryOrder) -> List[Country]:
    countries = dedupe_countries(countries)
    if order is CountryOrder.NAME:
        countries = sorted(countries, key=lambda c: c.name.lower())
    if not default:
        return countries

    wanted = default.lower()
    pinned = [c for c in countries if wanted in (c.code.lower(), c.name.lower())]
    others = [c for c in countries if c not in pinned]
    return pinned + others


def country_entries(countries: List[Country]) -> List[CountryEntry]:
    return [CountryEntry(code=c.code, title=c.name) for c in countries]


def station_entries(stations: List[Station], prefer_resolved: bool) -> List[StationEntry]:
    return [
        StationEntry(id=s.id, title=s.name, cover=s.favicon, source=streams.describe(s, prefer_resolved))
        for s in stations
    ]


def category_entries(stations: List[Station], config: FeedConfig) -> List[CategoryEntry]:
    return [
        CategoryEntry(
            key=category.key,
            title=category.display_name,
            count=len(category.members),
            items=PageProvider(station_entries, category.members, config.resolved_url),
        )
        for category in grouping.group_categories(stations, config.category_order)
    ]


def country_page(stations: List[Station], config: FeedConfig) -> PageProvider:
    if config.show_categories:
        return PageProvider(category_entries, stations, config)
    return PageProvider(station_entries, stations, config.resolved_url)


class Catalog:
    """Everything the host application asks of the radio catalog."""

    def __init__(self, client: RadioBrowserClient, store: SettingsStore):
        self.client = client
        self.store = store

    def config(self) -> FeedConfig:
        return FeedConfig.load(self.store)

    async def _countries(self, config: FeedConfig) -> PageProvider[CountryEntry]:
        countries = await self.client.countries(config.server_endpoint)
        ordered = order_countries(countries, config.default_country, config.country_order)
        return PageProvider(country_entries, ordered)

    async def _stations(self, config: FeedConfig, code: str) -> List[Station]:
        return await self.client.stations_by_country(
            config.server_endpoint, code, config.station_order.query_value
        )

    def home_feed(self) -> FeedLoad[PageProvider[CountryEntry]]:
        config = self.config()
        return FeedLoad(lambda: self._countries(config))

    def country_feed(self, code: str) -> FeedLoad[PageProvider[Union[CategoryEntry, StationEntry]]]:
        config = self.config()

        async def produce():
            return country_page(await self._stations(config, code), config)

        return FeedLoad(produce)

    def category_page(self, code: str, key: str) -> FeedLoad[PageProvider[StationEntry]]:
        config = self.config()

        async def produce():
            stations = grouping.members(await self._stations(config, code), key)
            return PageProvider(station_entries, stations, config.resolved_url)

        return FeedLoad(produce)

    def search_feed(self, query: str) -> FeedLoad[PageProvider[StationEntry]]:
        config = self.config()

        async def produce():
            stations = await self.client.search(config.server_endpoint, query)
            return PageProvider(station_entries, stations, config.resolved_url)

        return FeedLoad(produce)

    async def load_stream(self, source: StreamDescriptor) -> PlayableSource:
        url = await streams.materialize(source.url, self.client.fetch)
        return streams.build_playable(source, url)

    async def radio(self, item_type: str, item_id: str) -> Radio:
        if item_type == "track":
            return Radio(id="", title="")
        raise UnsupportedOperation(f"{item_type.capitalize()} radio")

    def load_radio_tracks(self, radio: Radio) -> PageProvider[StationEntry]:
        return PageProvider.empty()

    def track_shelves(self, track_id: str) -> PageProvider[Any]:
        return PageProvider.empty()

    async def quick_search(self, query: str) -> List[Dict[str, str]]:
        return []

    async def search_tabs(self, query: str) -> List[CountryEntry]:
        return []

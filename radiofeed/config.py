"""Runtime options for the catalog.

Everything here is read from the settings store on every request and frozen
into a ``FeedConfig`` for the duration of that request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
import json
import logging

from radiofeed.database import SettingsStore

logger = logging.getLogger(__name__)

SERVERS = [
    "https://de2.api.radio-browser.info",
    "https://de1.api.radio-browser.info",
    "https://fi1.api.radio-browser.info",
]

SERVER_ENDPOINT = "server_endpoint"
DEFAULT_COUNTRY = "default_country"
COUNTRY_ORDER = "country_order"
STATION_ORDER = "station_order"
CATEGORY_ORDER = "category_order"
SHOW_CATEGORIES = "show_categories"
RESOLVED_URL = "resolved_url"

INITIALIZED = "initialized"
COUNTRIES_SNAPSHOT = "countries_snapshot"


class CountryOrder(str, Enum):
    SOURCE = "source"
    NAME = "name"


class StationOrder(str, Enum):
    NAME = "name"
    VOTES = "votes"
    CLICK_COUNT = "click_count"
    CLICK_TREND = "click_trend"
    RECENTLY_CHANGED = "recently_changed"

    @property
    def query_value(self) -> str:
        return _STATION_ORDER_PARAMS[self]


_STATION_ORDER_PARAMS = {
    StationOrder.NAME: "name",
    StationOrder.VOTES: "votes",
    StationOrder.CLICK_COUNT: "clickcount",
    StationOrder.CLICK_TREND: "clicktrend",
    StationOrder.RECENTLY_CHANGED: "lastchangetime",
}


class CategoryOrder(str, Enum):
    NAME = "name"
    STATION_COUNT = "station_count"


def _choice(enum, raw: Optional[str], default):
    try:
        return enum(raw) if raw is not None else default
    except ValueError:
        logger.warning("Ignoring unknown %s value %r", enum.__name__, raw)
        return default


@dataclass(frozen=True)
class FeedConfig:
    server_endpoint: str = SERVERS[0]
    default_country: Optional[str] = None
    country_order: CountryOrder = CountryOrder.SOURCE
    station_order: StationOrder = StationOrder.NAME
    category_order: CategoryOrder = CategoryOrder.NAME
    show_categories: bool = True
    resolved_url: bool = False

    @classmethod
    def load(cls, store: SettingsStore) -> "FeedConfig":
        server = store.get_string(SERVER_ENDPOINT)
        if server not in SERVERS:
            server = SERVERS[0]
        show = store.get_bool(SHOW_CATEGORIES)
        resolved = store.get_bool(RESOLVED_URL)
        return cls(
            server_endpoint=server,
            default_country=store.get_string(DEFAULT_COUNTRY) or None,
            country_order=_choice(CountryOrder, store.get_string(COUNTRY_ORDER), CountryOrder.SOURCE),
            station_order=_choice(StationOrder, store.get_string(STATION_ORDER), StationOrder.NAME),
            category_order=_choice(CategoryOrder, store.get_string(CATEGORY_ORDER), CategoryOrder.NAME),
            show_categories=True if show is None else show,
            resolved_url=False if resolved is None else resolved,
        )


def snapshot_countries(store: SettingsStore) -> List[Dict[str, str]]:
    raw = store.get_string(COUNTRIES_SNAPSHOT)
    if not raw:
        return []
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable country snapshot")
        return []


def setting_items(config: FeedConfig, store: SettingsStore) -> List[Dict[str, Any]]:
    """Describe the configuration surface for whoever renders a settings page."""
    countries = [c["code"] for c in snapshot_countries(store)]
    return [
        {
            "title": "Server",
            "key": SERVER_ENDPOINT,
            "description": "Radio Browser mirror to query",
            "type": "list",
            "choices": list(SERVERS),
            "value": config.server_endpoint,
        },
        {
            "title": "Default Country",
            "key": DEFAULT_COUNTRY,
            "description": "Country shown first on the home page",
            "type": "text",
            "choices": countries,
            "value": config.default_country,
        },
        {
            "title": "Country Order",
            "key": COUNTRY_ORDER,
            "description": "How the remaining countries are sorted",
            "type": "list",
            "choices": [o.value for o in CountryOrder],
            "value": config.country_order.value,
        },
        {
            "title": "Station Order",
            "key": STATION_ORDER,
            "description": "Order the directory returns stations in",
            "type": "list",
            "choices": [o.value for o in StationOrder],
            "value": config.station_order.value,
        },
        {
            "title": "Category Order",
            "key": CATEGORY_ORDER,
            "description": "Sort categories by name or by number of stations",
            "type": "list",
            "choices": [o.value for o in CategoryOrder],
            "value": config.category_order.value,
        },
        {
            "title": "Show Categories",
            "key": SHOW_CATEGORIES,
            "description": "Whether to sort stations by category on the home page",
            "type": "switch",
            "choices": None,
            "value": config.show_categories,
        },
        {
            "title": "Use Resolved URLs",
            "key": RESOLVED_URL,
            "description": "Radio Browser offers resolved URLs for stations, this option specifies which URL to use",
            "type": "switch",
            "choices": None,
            "value": config.resolved_url,
        },
    ]


def update_setting(store: SettingsStore, key: str, value: Any):
    """Validate and persist one user change. Raises ValueError on bad input."""
    if key in (SHOW_CATEGORIES, RESOLVED_URL):
        if not isinstance(value, bool):
            raise ValueError(f"{key} expects a boolean")
        store.put_bool(key, value)
        return

    if not isinstance(value, str):
        raise ValueError(f"{key} expects a string")
    if key == SERVER_ENDPOINT:
        if value not in SERVERS:
            raise ValueError(f"Unknown server {value!r}")
    elif key == COUNTRY_ORDER:
        CountryOrder(value)
    elif key == STATION_ORDER:
        StationOrder(value)
    elif key == CATEGORY_ORDER:
        CategoryOrder(value)
    elif key != DEFAULT_COUNTRY:
        raise KeyError(key)
    store.put_string(key, value)


async def seed_first_run(store: SettingsStore, client) -> bool:
    """Take the one-time country snapshot used to offer default-country choices.

    Safe to race: both writers store the same thing.
    """
    if store.get_bool(INITIALIZED):
        return False
    config = FeedConfig.load(store)
    countries = await client.countries(config.server_endpoint)
    store.put_string(COUNTRIES_SNAPSHOT, json.dumps([c.model_dump() for c in countries]))
    store.put_bool(INITIALIZED, True)
    logger.info("Seeded %d countries on first run", len(countries))
    return True

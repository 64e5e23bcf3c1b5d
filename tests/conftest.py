import json
import sqlite3
from typing import Callable, Dict, Union

import httpx
import pytest
import sqlite_utils

from radiofeed.database import SettingsStore
from radiofeed.parsers.radio_browser import RadioBrowserClient

Route = Union[bytes, str, int, list, Callable[[httpx.Request], httpx.Response]]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store() -> SettingsStore:
    # TestClient drives the app from a worker thread
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    return SettingsStore(sqlite_utils.Database(conn))


def station(uuid: str, tags: str = "", **extra) -> Dict:
    record = {
        "stationuuid": uuid,
        "name": f"Station {uuid}",
        "url": f"http://stream.example/{uuid}.mp3",
        "url_resolved": f"http://resolved.example/{uuid}.mp3",
        "favicon": "",
        "tags": tags,
        "bitrate": 128,
        "hls": 0,
        "votes": 3,
    }
    record.update(extra)
    return record


def make_client(routes: Dict[str, Route], seen: list = None) -> RadioBrowserClient:
    """Answer requests by URL path. Lists are served as JSON, ints as bare status codes."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        if isinstance(route, int):
            return httpx.Response(route)
        if isinstance(route, list):
            return httpx.Response(200, content=json.dumps(route).encode())
        return httpx.Response(200, content=route if isinstance(route, bytes) else route.encode())

    return RadioBrowserClient(transport=httpx.MockTransport(handler))

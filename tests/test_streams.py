import httpx
import pytest

from radiofeed.errors import NetworkError
from radiofeed.models import SourceKind, Station, StreamDescriptor
from radiofeed.streams import (
    UrlKind,
    build_playable,
    classify,
    describe,
    materialize,
    parse_pls,
    resolve,
)
from tests.conftest import make_client

POINTER = "File1=http://stream.example/live.mp3\nFile2=ignored"


@pytest.mark.parametrize("prefer_resolved", [True, False])
def test_hls_flag_wins_regardless_of_url_choice(prefer_resolved):
    _, kind = resolve("http://a", "http://b", 1, prefer_resolved)
    assert kind is SourceKind.HLS


def test_candidate_follows_resolved_url_flag():
    assert resolve("http://a", "http://b", 0, False) == ("http://a", SourceKind.PROGRESSIVE)
    assert resolve("http://a", "http://b", 0, True) == ("http://b", SourceKind.PROGRESSIVE)


def test_describe_bitrate_label():
    s = Station(id="1", name="n", url="http://a", url_resolved="http://b", bitrate=128)
    assert describe(s, True) == StreamDescriptor(url="http://b", kind=SourceKind.PROGRESSIVE, bitrate_label="128 kbps")
    assert describe(s.model_copy(update={"bitrate": 0}), False).bitrate_label is None


@pytest.mark.parametrize("url,kind", [
    ("http://host/listen.pls", UrlKind.PLAYLIST_POINTER),
    ("http://host/LISTEN.PLS", UrlKind.PLAYLIST_POINTER),
    ("http://host/listen.pls?sid=1", UrlKind.PLAYLIST_POINTER),
    ("http://host/PLS?sid=1", UrlKind.PLAYLIST_POINTER),
    ("http://host/live.mp3", UrlKind.DIRECT),
    ("http://host/pls/live.mp3", UrlKind.DIRECT),
    ("http://host/playlist.m3u8", UrlKind.DIRECT),
])
def test_classify(url, kind):
    assert classify(url) is kind


def test_parse_pls():
    assert parse_pls(POINTER) == "http://stream.example/live.mp3"
    assert parse_pls("[playlist]\r\nFile1=http://a\r\nTitle1=x\r\n") == "http://a"
    assert parse_pls("[playlist]\nfile1=http://a\nFile2=http://b") == ""


@pytest.mark.anyio
async def test_materialize_follows_pointer():
    client = make_client({"/listen.pls": POINTER})
    assert await materialize("http://host/listen.pls", client.fetch) == "http://stream.example/live.mp3"


@pytest.mark.anyio
async def test_materialize_direct_url_does_not_fetch():
    async def fetch(url):
        raise AssertionError("should not fetch")

    assert await materialize("http://host/live.mp3", fetch) == "http://host/live.mp3"


@pytest.mark.anyio
async def test_materialize_failures_yield_empty_url():
    client = make_client({"/empty.pls": "[playlist]\nNumberOfEntries=0", "/down.pls": 500})
    assert await materialize("http://host/empty.pls", client.fetch) == ""
    assert await materialize("http://host/down.pls", client.fetch) == ""

    async def unreachable(url):
        raise NetworkError(url, "Request failed")

    assert await materialize("http://host/x.pls", unreachable) == ""


def test_build_playable_is_live():
    d = StreamDescriptor(url="http://host/x.pls", kind=SourceKind.HLS)
    source = build_playable(d, "http://real")
    assert source.url == "http://real"
    assert source.kind is SourceKind.HLS
    assert source.live is True
    assert source.bitrate_label is None


def test_classify_tolerates_unbalanced_brackets():
    assert classify("http://[bad/live.mp3") is UrlKind.DIRECT
    assert classify("http://[bad/listen.pls?sid=2") is UrlKind.PLAYLIST_POINTER


@pytest.mark.anyio
async def test_materialize_malformed_urls():
    client = make_client({})
    assert await materialize("http://[bad/live.mp3", client.fetch) == "http://[bad/live.mp3"
    assert await materialize("http://[bad/listen.pls", client.fetch) == ""

    async def rejects(url):
        raise ValueError("Invalid IPv6 URL")

    assert await materialize("http://[bad/listen.pls", rejects) == ""

from enum import Enum
from typing import Awaitable, Callable, Tuple
from urllib.parse import urlsplit
import logging

from radiofeed.errors import NetworkError
from radiofeed.models import PlayableSource, SourceKind, Station, StreamDescriptor

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[bytes]]

PLS_ENTRY = "File1="


class UrlKind(str, Enum):
    DIRECT = "direct"
    PLAYLIST_POINTER = "playlist_pointer"


def resolve(station_url: str, resolved_url: str, hls_flag: int, prefer_resolved: bool) -> Tuple[str, SourceKind]:
    candidate = resolved_url if prefer_resolved else station_url
    kind = SourceKind.HLS if hls_flag == 1 else SourceKind.PROGRESSIVE
    return candidate, kind


def bitrate_label(bitrate: int):
    return f"{bitrate} kbps" if bitrate != 0 else None


def describe(station: Station, prefer_resolved: bool) -> StreamDescriptor:
    url, kind = resolve(station.url, station.url_resolved, station.hls, prefer_resolved)
    return StreamDescriptor(url=url, kind=kind, bitrate_label=bitrate_label(station.bitrate))


def classify(url: str) -> UrlKind:
    """Tell a ``.pls`` redirect file apart from a stream we can hand to the player.

    Shoutcast style ``/pls?sid=1`` endpoints count as pointers too.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        # unbalanced brackets in the host; judge the raw text before the query
        path = url.split("?", 1)[0].split("#", 1)[0]
    if path.lower().endswith(".pls"):
        return UrlKind.PLAYLIST_POINTER
    if url.rsplit("/", 1)[-1][:4].lower() == "pls?":
        return UrlKind.PLAYLIST_POINTER
    return UrlKind.DIRECT


def parse_pls(text: str) -> str:
    for line in text.splitlines():
        if line.startswith(PLS_ENTRY):
            return line[len(PLS_ENTRY):].strip()
    return ""


async def materialize(candidate_url: str, fetch: Fetch) -> str:
    """Return the URL the player should open, or "" when a pointer can't be followed."""
    if classify(candidate_url) is UrlKind.DIRECT:
        return candidate_url

    try:
        body = await fetch(candidate_url)
    except (NetworkError, ValueError) as exc:
        logger.warning("Playlist pointer unreachable: %s", exc)
        return ""

    url = parse_pls(body.decode("utf-8", errors="replace"))
    if not url:
        logger.warning("No %s entry in playlist pointer %s", PLS_ENTRY, candidate_url)
    return url


def build_playable(descriptor: StreamDescriptor, url: str) -> PlayableSource:
    return PlayableSource(url=url, kind=descriptor.kind, bitrate_label=descriptor.bitrate_label, live=True)

"""Tag based categories for a country's station list.

Radio Browser tags are a free-form comma separated string. Every distinct tag
becomes a category; stations without any tag land in ``unknown``.
"""
from typing import Dict, List, Set
import re

from radiofeed.config import CategoryOrder
from radiofeed.models import Category, Station

UNKNOWN = "unknown"


def split_tags(tags: str) -> Set[str]:
    keys = {t for t in tags.split(",") if t}
    return keys or {UNKNOWN}


def _ordered_keys(tags: str) -> List[str]:
    # split_tags loses discovery order, which station_count ties depend on
    keys = list(dict.fromkeys(t for t in tags.split(",") if t))
    return keys or [UNKNOWN]


def in_category(station: Station, key: str) -> bool:
    # Only a tag field with no real tag in it means "unknown"; "jazz," is just jazz.
    return key in split_tags(station.tags)


def display_name(key: str) -> str:
    return re.sub(r"(^|\s)(\S)", lambda m: m.group(1) + m.group(2).upper(), key)


def members(stations: List[Station], key: str) -> List[Station]:
    return [s for s in stations if in_category(s, key)]


def group_categories(stations: List[Station], order: CategoryOrder) -> List[Category]:
    buckets: Dict[str, List[Station]] = {}
    for station in stations:
        for key in _ordered_keys(station.tags):
            buckets.setdefault(key, []).append(station)

    keys = list(buckets)
    if order is CategoryOrder.NAME:
        keys.sort()
    else:
        keys.sort(key=lambda k: len(buckets[k]), reverse=True)

    return [Category(key=k, display_name=display_name(k), members=buckets[k]) for k in keys]

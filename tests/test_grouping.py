import pytest

from radiofeed.config import CategoryOrder
from radiofeed.grouping import (
    UNKNOWN,
    display_name,
    group_categories,
    in_category,
    split_tags,
)
from radiofeed.models import Station


def st(uuid, tags):
    return Station(id=uuid, name=uuid, url=f"http://{uuid}", tags=tags)


STATIONS = [
    st("a", "jazz,rock"),
    st("b", "pop"),
    st("c", ""),
    st("d", "rock"),
    st("e", "jazz,"),
    st("f", "pop,rock"),
]


def test_split_tags():
    assert split_tags("jazz,rock") == {"jazz", "rock"}
    assert split_tags("") == {UNKNOWN}
    assert split_tags("jazz,") == {"jazz"}
    assert split_tags("jazz,,rock") == {"jazz", "rock"}


@pytest.mark.parametrize("order", list(CategoryOrder))
def test_every_station_lands_in_exactly_its_categories(order):
    categories = group_categories(STATIONS, order)
    for s in STATIONS:
        found = {c.key for c in categories if s in c.members}
        assert found == split_tags(s.tags)
        assert all(c.members.count(s) <= 1 for c in categories)


def test_keys_are_distinct():
    keys = [c.key for c in group_categories(STATIONS + [st("g", "jazz,jazz")], CategoryOrder.NAME)]
    assert len(keys) == len(set(keys))


def test_order_by_name():
    keys = [c.key for c in group_categories(STATIONS, CategoryOrder.NAME)]
    assert keys == ["jazz", "pop", "rock", "unknown"]


def test_order_by_station_count_is_stable():
    categories = group_categories(STATIONS, CategoryOrder.STATION_COUNT)
    counts = [len(c.members) for c in categories]
    assert counts == sorted(counts, reverse=True)
    # jazz and pop tie at two; jazz was seen first
    assert [c.key for c in categories] == ["rock", "jazz", "pop", "unknown"]


def test_trailing_comma_does_not_mean_unknown():
    s = st("e", "jazz,")
    assert in_category(s, "jazz")
    assert not in_category(s, UNKNOWN)
    mixed = st("m", "jazz,,rock")
    assert not in_category(mixed, UNKNOWN)
    assert in_category(st("c", ""), UNKNOWN)


def test_membership_is_exact_tag_match():
    assert not in_category(st("x", "jazzy"), "jazz")


def test_display_name():
    assert display_name("public radio") == "Public Radio"
    assert display_name("80s") == "80s"
    assert display_name("hip-hop rAP") == "Hip-hop RAP"
    assert display_name("unknown") == "Unknown"


def test_display_name_keeps_spacing():
    assert display_name(" rock") == " Rock"
    assert display_name("a  b") == "A  B"
    assert display_name("drum\tbass") == "Drum\tBass"

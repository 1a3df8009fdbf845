import pytest

from hotel_booking.models.amenity_set import AmenitySet


def test_tags_are_normalized():
    assert AmenitySet([" WiFi ", "tv", "", "TV"]) == {"wifi", "tv"}


@pytest.mark.parametrize("value", [
    ["wifi", "tv"],
    '["wifi", "tv"]',
    "wifi, tv",
    ["wifi,tv"],
    ['["tv"]', "wifi"],
])
def test_parse_accepts_request_shapes(value):
    assert AmenitySet.parse(value) == {"wifi", "tv"}


@pytest.mark.parametrize("value", [None, "", "  ", "[]", []])
def test_parse_empty(value):
    assert AmenitySet.parse(value) == AmenitySet()


@pytest.mark.parametrize("value", ["[1, 2]", [1], 42, "[not json"])
def test_parse_rejects_garbage(value):
    with pytest.raises(ValueError):
        AmenitySet.parse(value)


def test_canonical_json_is_sorted():
    assert AmenitySet(["wifi", "balcony", "tv"]).to_json() == '["balcony","tv","wifi"]'


def test_superset_semantics():
    room = AmenitySet(["wifi", "tv", "minibar"])
    assert room.issuperset(AmenitySet(["tv", "wifi"]))
    assert room.issuperset(AmenitySet())
    assert not room.issuperset(AmenitySet(["balcony"]))

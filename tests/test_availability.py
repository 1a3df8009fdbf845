import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_booking, make_room, make_user, utc
from hotel_booking.core.errors import StorageError
from hotel_booking.schemas.room import RoomSearchCriteria
from hotel_booking.services.availability import (
    find_available_rooms,
    intervals_overlap,
    room_has_conflict,
    search_available_rooms,
)


def search(db, check_in, check_out, **filters):
    criteria = RoomSearchCriteria(checkInDate=check_in, checkOutDate=check_out, **filters)
    return [r.room_number for r in search_available_rooms(db, criteria)]


@pytest.fixture
def hotel(db):
    """Room 101 booked 20-25 March, room 102 under maintenance."""
    guest = make_user(db)
    r101 = make_room(db, "101", price="100.00", max_guests=2)
    make_room(db, "102", status="maintenance")
    make_booking(db, r101, guest, utc(2024, 3, 20), utc(2024, 3, 25), status="confirmed")
    return guest


def test_intervals_overlap_is_half_open():
    assert intervals_overlap(utc(2024, 3, 20), utc(2024, 3, 25), utc(2024, 3, 22), utc(2024, 3, 24))
    assert intervals_overlap(utc(2024, 3, 20), utc(2024, 3, 25), utc(2024, 3, 18), utc(2024, 3, 21))
    assert not intervals_overlap(utc(2024, 3, 20), utc(2024, 3, 25), utc(2024, 3, 25), utc(2024, 3, 27))
    assert not intervals_overlap(utc(2024, 3, 20), utc(2024, 3, 25), utc(2024, 3, 18), utc(2024, 3, 20))


def test_overlapping_booking_excludes_room(db, hotel):
    assert search(db, "2024-03-22", "2024-03-24") == []


def test_stay_starting_at_checkout_is_allowed(db, hotel):
    assert search(db, "2024-03-25", "2024-03-27") == ["101"]


def test_stay_ending_at_checkin_is_allowed(db, hotel):
    assert search(db, "2024-03-18", "2024-03-20") == ["101"]


def test_disjoint_stay_is_allowed(db, hotel):
    assert search(db, "2024-03-10", "2024-03-15") == ["101"]


def test_stay_enclosing_booking_is_blocked(db, hotel):
    assert search(db, "2024-03-01", "2024-03-31") == []


def test_room_under_maintenance_never_returned(db, hotel):
    for ci, co in [("2024-01-01", "2024-01-02"), ("2024-03-25", "2024-03-27"), ("2025-06-01", "2025-06-10")]:
        assert "102" not in search(db, ci, co)


def test_cancelled_booking_does_not_block(db):
    guest = make_user(db)
    room = make_room(db, "201")
    make_booking(db, room, guest, utc(2024, 3, 20), utc(2024, 3, 25), status="cancelled")
    assert search(db, "2024-03-22", "2024-03-24") == ["201"]


@pytest.mark.parametrize("status", ["pending", "confirmed", "completed"])
def test_every_live_status_blocks(db, status):
    guest = make_user(db)
    room = make_room(db, "201")
    make_booking(db, room, guest, utc(2024, 3, 20), utc(2024, 3, 25), status=status)
    assert search(db, "2024-03-22", "2024-03-24") == []


def test_room_with_many_bookings_is_returned_once(db):
    guest = make_user(db)
    room = make_room(db, "301")
    make_booking(db, room, guest, utc(2024, 1, 1), utc(2024, 1, 5))
    make_booking(db, room, guest, utc(2024, 2, 1), utc(2024, 2, 5))
    make_booking(db, room, guest, utc(2024, 4, 1), utc(2024, 4, 5), status="cancelled")
    assert search(db, "2024-03-01", "2024-03-10") == ["301"]


def test_soft_deleted_room_is_not_returned(db):
    room = make_room(db, "401")
    room.deleted_at = utc(2024, 1, 1)
    db.commit()
    assert search(db, "2024-03-01", "2024-03-02") == []


def test_static_filters(db):
    make_room(db, "101", room_type="single", price="80.00", max_guests=1)
    make_room(db, "102", room_type="double", price="120.00", max_guests=2)
    make_room(db, "103", room_type="suite", price="250.00", max_guests=4)

    assert search(db, "2024-05-01", "2024-05-03", roomType="double") == ["102"]
    assert search(db, "2024-05-01", "2024-05-03", roomType="DOUBLE") == ["102"]
    assert search(db, "2024-05-01", "2024-05-03", maxGuests=2) == ["102", "103"]
    # price bounds are inclusive
    assert search(db, "2024-05-01", "2024-05-03", minPrice=120, maxPrice=250) == ["102", "103"]
    assert search(db, "2024-05-01", "2024-05-03", maxPrice=80) == ["101"]


def test_filters_only_narrow(db):
    make_room(db, "101", room_type="single", price="80.00", max_guests=1, amenities=["wifi"])
    make_room(db, "102", room_type="double", price="120.00", max_guests=2, amenities=["wifi", "tv"])
    make_room(db, "103", room_type="double", price="140.00", max_guests=3, amenities=["tv"])

    base = set(search(db, "2024-05-01", "2024-05-03"))
    narrowed = set(search(db, "2024-05-01", "2024-05-03", roomType="double"))
    narrower = set(search(db, "2024-05-01", "2024-05-03", roomType="double", amenities=["wifi"]))
    assert narrower <= narrowed <= base
    assert narrower == {"102"}


def test_amenities_require_every_tag(db):
    make_room(db, "101", amenities=["wifi", "tv"])
    make_room(db, "102", amenities=["WiFi", "TV", "Minibar"])
    make_room(db, "103", amenities=[])

    assert search(db, "2024-05-01", "2024-05-03", amenities=["wifi", "tv"]) == ["101", "102"]
    assert search(db, "2024-05-01", "2024-05-03", amenities='["minibar"]') == ["102"]
    assert search(db, "2024-05-01", "2024-05-03", amenities="tv,minibar") == ["102"]
    assert search(db, "2024-05-01", "2024-05-03", amenities=[]) == ["101", "102", "103"]


def test_sort_by_price_breaks_ties_by_id(db):
    make_room(db, "A1", price="100.00")
    make_room(db, "B1", price="200.00")
    make_room(db, "C1", price="100.00")

    assert search(db, "2024-05-01", "2024-05-03", sortBy="price") == ["A1", "C1", "B1"]
    assert search(db, "2024-05-01", "2024-05-03", sortBy="price", sortOrder="desc") == ["B1", "A1", "C1"]


def test_sort_by_type_uses_catalogue_order(db):
    make_room(db, "1", room_type="suite")
    make_room(db, "2", room_type="single")
    make_room(db, "3", room_type="deluxe")
    make_room(db, "4", room_type="double")

    assert search(db, "2024-05-01", "2024-05-03", sortBy="type") == ["2", "4", "1", "3"]


def test_default_order_is_room_id(db):
    make_room(db, "300")
    make_room(db, "100")
    make_room(db, "200")
    assert search(db, "2024-05-01", "2024-05-03") == ["300", "100", "200"]


def test_repeated_search_is_stable(db, hotel):
    make_room(db, "103", price="90.00")
    first = search(db, "2024-03-25", "2024-03-27", sortBy="price")
    second = search(db, "2024-03-25", "2024-03-27", sortBy="price")
    assert first == second == ["103", "101"]


def test_inverted_interval_returns_nothing(db):
    make_room(db, "101")
    criteria = RoomSearchCriteria.model_construct(
        checkInDate=utc(2024, 3, 25), checkOutDate=utc(2024, 3, 20), roomType=None, maxGuests=None,
        minPrice=None, maxPrice=None, amenities=frozenset(), sortBy=None, sortOrder="ASC",
    )
    assert search_available_rooms(db, criteria) == []


def test_criteria_reject_inverted_interval():
    with pytest.raises(ValueError):
        RoomSearchCriteria(checkInDate="2024-03-25", checkOutDate="2024-03-25")


def test_find_available_rooms_uses_same_rules(db, hotel):
    rooms = find_available_rooms(db, utc(2024, 3, 22), utc(2024, 3, 24))
    assert rooms == []
    rooms = find_available_rooms(db, utc(2024, 3, 25), utc(2024, 3, 26), max_guests=2, max_price=100)
    assert [r.room_number for r in rooms] == ["101"]


def test_room_has_conflict_can_exclude_a_booking(db):
    guest = make_user(db)
    room = make_room(db, "101")
    b = make_booking(db, room, guest, utc(2024, 3, 20), utc(2024, 3, 25))
    assert room_has_conflict(db, room.id, utc(2024, 3, 21), utc(2024, 3, 22))
    assert not room_has_conflict(db, room.id, utc(2024, 3, 21), utc(2024, 3, 22), exclude_booking_id=b.id)


class _BrokenSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_storage_failure_is_not_an_empty_result():
    criteria = RoomSearchCriteria(checkInDate="2024-03-01", checkOutDate="2024-03-02")
    with pytest.raises(StorageError) as exc:
        search_available_rooms(_BrokenSession(), criteria)
    assert exc.value.status_code == 503
    assert exc.value.code == "DATABASE_ERROR"

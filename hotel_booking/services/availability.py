"""Room availability search.

A room is bookable for a stay when two independent predicates hold:

* it is *operationally available*: not soft-deleted and its staff-managed
  ``availability_status`` is ``available``;
* it is *free of conflicts*: no booking on the room whose status is not ``cancelled``
  overlaps the half-open stay ``[check_in, check_out)``.

Both are SQL expressions over ``Room`` so they compose with the static filters. The
conflict predicate is a correlated ``NOT EXISTS``, so a room is returned at most once no
matter how many bookings it has.
"""
import logging
from datetime import datetime

from sqlalchemy import and_, case, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_booking.core.dates import as_utc
from hotel_booking.core.errors import StorageError
from hotel_booking.models.booking import Booking
from hotel_booking.models.enums import AvailabilityStatus, BookingStatus, RoomKind
from hotel_booking.models.room import Room
from hotel_booking.schemas.room import RoomSearchCriteria

logger = logging.getLogger(__name__)

# room types sort in catalogue order, not alphabetically
_TYPE_RANK = case(
    {kind.value: rank for rank, kind in enumerate(RoomKind)},
    value=Room.room_type,
    else_=len(RoomKind),
)

SORT_COLUMNS = {
    "price": Room.price_per_night,
    "type": _TYPE_RANK,
    "maxGuests": Room.max_guests,
    "roomNumber": Room.room_number,
}


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open intervals overlap iff each starts before the other ends."""
    return a_start < b_end and b_start < a_end


def operationally_available():
    return and_(
        Room.deleted_at.is_(None),
        Room.availability_status == AvailabilityStatus.AVAILABLE.value,
    )


def overlapping_booking(room_id, check_in: datetime, check_out: datetime, exclude_booking_id: int | None = None):
    """Bookings on ``room_id`` that block the stay ``[check_in, check_out)``."""
    clause = and_(
        Booking.room_id == room_id,
        Booking.status != BookingStatus.CANCELLED.value,
        Booking.check_in_date < check_out,
        check_in < Booking.check_out_date,
    )
    if exclude_booking_id is not None:
        clause = and_(clause, Booking.id != exclude_booking_id)
    return clause


def free_of_conflicts(check_in: datetime, check_out: datetime):
    return ~exists().where(overlapping_booking(Room.id, check_in, check_out))


def _ordering(sort_by: str | None, sort_order: str):
    if not sort_by:
        return [Room.id.asc()]
    col = SORT_COLUMNS[sort_by]
    primary = col.desc() if sort_order == "DESC" else col.asc()
    return [primary, Room.id.asc()]


def search_available_rooms(db: Session, criteria: RoomSearchCriteria) -> list[Room]:
    """Rooms that can be booked for the requested stay, filtered and ordered.

    Read-only. An empty list means nothing matched; storage failures raise StorageError.
    """
    check_in = as_utc(criteria.checkInDate)
    check_out = as_utc(criteria.checkOutDate)
    if check_out <= check_in:
        logger.debug("empty stay %s -> %s, nothing to search", check_in, check_out)
        return []

    stmt = select(Room).where(operationally_available(), free_of_conflicts(check_in, check_out))
    if criteria.roomType:
        stmt = stmt.where(Room.room_type == RoomKind(criteria.roomType).value)
    if criteria.maxGuests is not None:
        stmt = stmt.where(Room.max_guests >= criteria.maxGuests)
    if criteria.minPrice is not None:
        stmt = stmt.where(Room.price_per_night >= criteria.minPrice)
    if criteria.maxPrice is not None:
        stmt = stmt.where(Room.price_per_night <= criteria.maxPrice)
    stmt = stmt.order_by(*_ordering(criteria.sortBy, criteria.sortOrder))

    try:
        rooms = list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.exception("availability search failed")
        raise StorageError("Failed to fetch available rooms", e) from e

    # amenities are serialized text, so the superset test runs here rather than in SQL
    if criteria.amenities:
        rooms = [r for r in rooms if r.amenities.issuperset(criteria.amenities)]
    return rooms


def find_available_rooms(db: Session, check_in, check_out, room_type=None, max_guests=None, max_price=None) -> list[Room]:
    """Older entry point kept for ``GET /rooms/available``."""
    criteria = RoomSearchCriteria.model_construct(
        checkInDate=check_in,
        checkOutDate=check_out,
        roomType=room_type,
        maxGuests=max_guests,
        minPrice=None,
        maxPrice=max_price,
        amenities=frozenset(),
        sortBy=None,
        sortOrder="ASC",
    )
    return search_available_rooms(db, criteria)


def room_has_conflict(db: Session, room_id: int, check_in: datetime, check_out: datetime,
                      exclude_booking_id: int | None = None) -> bool:
    stmt = select(Booking.id).where(
        overlapping_booking(room_id, as_utc(check_in), as_utc(check_out), exclude_booking_id)
    ).limit(1)
    return db.execute(stmt).first() is not None

import logging
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from hotel_booking.core.dates import as_utc
from hotel_booking.core.errors import BookingValidationError, ResourceNotFoundError, RoomUnavailableError
from hotel_booking.models.booking import Booking
from hotel_booking.models.enums import AvailabilityStatus, BookingStatus
from hotel_booking.models.room import Room
from hotel_booking.models.user import User
from hotel_booking.services.audit_service import log_audit
from hotel_booking.services.availability import room_has_conflict

logger = logging.getLogger(__name__)

# allowed status moves; a same-status update is always a no-op
TRANSITIONS = {
    BookingStatus.PENDING.value: {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value},
    BookingStatus.CONFIRMED.value: {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value},
    BookingStatus.CANCELLED.value: set(),
    BookingStatus.COMPLETED.value: set(),
}


def _check_dates(check_in: datetime, check_out: datetime) -> None:
    if check_in >= check_out:
        raise BookingValidationError(
            "Check-in date must be before check-out date",
            [
                {"field": "checkInDate", "message": "Check-in date must be before check-out date"},
                {"field": "checkOutDate", "message": "Check-out date must be after check-in date"},
            ],
        )


def _check_guests(room: Room, guests: int) -> None:
    if guests < 1:
        raise BookingValidationError("numberOfGuests must be at least 1",
                                     [{"field": "numberOfGuests", "message": "must be at least 1"}])
    if guests > room.max_guests:
        raise BookingValidationError(
            f"Room {room.room_number} holds at most {room.max_guests} guests",
            [{"field": "numberOfGuests", "message": f"must not exceed {room.max_guests}"}],
        )


def _lock_room(db: Session, room_id: int) -> Room:
    # row lock serializes concurrent bookings of the same room (no-op on SQLite)
    room = db.execute(
        select(Room).where(Room.id == room_id, Room.deleted_at.is_(None)).with_for_update()
    ).scalar_one_or_none()
    if not room:
        raise ResourceNotFoundError("Room", room_id)
    return room


def check_transition(current: str, new: str) -> None:
    if new == current:
        return
    if new not in TRANSITIONS.get(current, set()):
        raise BookingValidationError(
            f"Cannot change booking status from {current} to {new}",
            [{"field": "status", "message": f"{current} -> {new} is not allowed"}],
        )


def create_booking(db: Session, user_id: int, room_id: int, check_in: datetime, check_out: datetime,
                   number_of_guests: int = 1, special_requests: str | None = None,
                   actor_id: int | None = None) -> Booking:
    check_in, check_out = as_utc(check_in), as_utc(check_out)
    _check_dates(check_in, check_out)

    user = db.get(User, user_id)
    if not user or user.deleted_at is not None:
        raise ResourceNotFoundError("User", user_id)

    room = _lock_room(db, room_id)
    if room.availability_status != AvailabilityStatus.AVAILABLE.value:
        db.rollback()
        raise RoomUnavailableError(f"Room {room.room_number} is not available ({room.availability_status})")
    try:
        _check_guests(room, number_of_guests)
    except BookingValidationError:
        db.rollback()
        raise

    if room_has_conflict(db, room.id, check_in, check_out):
        db.rollback()
        raise RoomUnavailableError(
            f"Room {room.room_number} is already booked for the requested dates",
            {"roomId": room.id, "checkInDate": check_in.isoformat(), "checkOutDate": check_out.isoformat()},
        )

    b = Booking(
        user_id=user.id,
        room_id=room.id,
        check_in_date=check_in,
        check_out_date=check_out,
        number_of_guests=number_of_guests,
        status=BookingStatus.PENDING.value,
        special_requests=special_requests,
    )
    db.add(b)
    db.flush()
    log_audit(db, actor_id, "booking.create", "booking", b.id, {"roomId": room.id, "userId": user.id})
    db.commit()
    db.refresh(b)
    logger.info("booking %s created: room %s %s -> %s", b.id, room.id, check_in.date(), check_out.date())
    return b


def get_booking(db: Session, booking_id: int) -> Booking:
    if booking_id <= 0:
        raise ResourceNotFoundError("Booking", booking_id)
    b = db.get(Booking, booking_id)
    if not b:
        raise ResourceNotFoundError("Booking", booking_id)
    return b


def get_booking_detail(db: Session, booking_id: int) -> tuple[Booking, Room, User]:
    row = db.execute(
        select(Booking, Room, User)
        .join(Room, Room.id == Booking.room_id)
        .join(User, User.id == Booking.user_id)
        .where(Booking.id == booking_id)
    ).first()
    if not row:
        raise ResourceNotFoundError("Booking", booking_id)
    return row[0], row[1], row[2]


def list_bookings(db: Session, user_id: int | None = None) -> list[Booking]:
    stmt = select(Booking)
    if user_id is not None:
        stmt = stmt.where(Booking.user_id == user_id)
    return list(db.execute(stmt.order_by(Booking.check_in_date.asc(), Booking.id.asc())).scalars().all())


def list_bookings_for_room(db: Session, room_id: int) -> list[Booking]:
    stmt = select(Booking).where(Booking.room_id == room_id).order_by(Booking.check_in_date.asc(), Booking.id.asc())
    return list(db.execute(stmt).scalars().all())


def update_booking(db: Session, booking_id: int, changes: dict, actor_id: int | None = None) -> Booking:
    """Apply ``BookingUpdate``-shaped changes.

    Date, room or guest changes are validated against the (possibly new) room and re-checked
    for conflicts with every other booking; the booking never conflicts with itself.
    """
    b = get_booking(db, booking_id)
    new_status = changes.get("status")
    if new_status is not None:
        new_status = BookingStatus(new_status).value
        check_transition(b.status, new_status)

    stay_changed = any(changes.get(k) is not None for k in ("roomId", "checkInDate", "checkOutDate", "numberOfGuests"))
    if stay_changed:
        if b.status in (BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value):
            raise BookingValidationError(f"Cannot modify a {b.status} booking")
        check_in = as_utc(changes.get("checkInDate") or b.check_in_date)
        check_out = as_utc(changes.get("checkOutDate") or b.check_out_date)
        _check_dates(check_in, check_out)
        room = _lock_room(db, changes.get("roomId") or b.room_id)
        if room.id != b.room_id and room.availability_status != AvailabilityStatus.AVAILABLE.value:
            db.rollback()
            raise RoomUnavailableError(f"Room {room.room_number} is not available ({room.availability_status})")
        guests = changes.get("numberOfGuests") or b.number_of_guests
        try:
            _check_guests(room, guests)
        except BookingValidationError:
            db.rollback()
            raise
        if room_has_conflict(db, room.id, check_in, check_out, exclude_booking_id=b.id):
            db.rollback()
            raise RoomUnavailableError(f"Room {room.room_number} is already booked for the requested dates")
        b.room_id = room.id
        b.check_in_date = check_in
        b.check_out_date = check_out
        b.number_of_guests = guests

    if "specialRequests" in changes and changes["specialRequests"] is not None:
        b.special_requests = changes["specialRequests"]
    if new_status is not None and new_status != b.status:
        logger.info("booking %s %s -> %s", b.id, b.status, new_status)
        b.status = new_status

    log_audit(db, actor_id, "booking.update", "booking", b.id, changes)
    db.commit()
    db.refresh(b)
    return b


def cancel_booking(db: Session, booking_id: int, actor_id: int | None = None) -> Booking:
    """Mark cancelled; the row is kept and stops blocking the room's dates."""
    b = get_booking(db, booking_id)
    if b.status == BookingStatus.CANCELLED.value:
        return b
    check_transition(b.status, BookingStatus.CANCELLED.value)
    b.status = BookingStatus.CANCELLED.value
    log_audit(db, actor_id, "booking.cancel", "booking", b.id)
    db.commit()
    db.refresh(b)
    logger.info("booking %s cancelled", b.id)
    return b

import logging
from datetime import datetime, timezone
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hotel_booking.core.errors import ConflictError, ResourceNotFoundError
from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.enums import AvailabilityStatus
from hotel_booking.models.room import Room
from hotel_booking.schemas.room import RoomCreate, RoomUpdate
from hotel_booking.services.audit_service import log_audit

logger = logging.getLogger(__name__)

# request field -> column
_FIELDS = {
    "roomNumber": "room_number",
    "type": "room_type",
    "pricePerNight": "price_per_night",
    "maxGuests": "max_guests",
    "description": "description",
    "amenities": "amenities",
    "availabilityStatus": "availability_status",
}


def _column_value(field: str, value):
    if field == "amenities":
        return AmenitySet.parse(value)
    if hasattr(value, "value"):
        return value.value
    return value


def list_rooms(db: Session, q: str | None = None) -> list[Room]:
    stmt = select(Room).where(Room.deleted_at.is_(None))
    if q:
        stmt = stmt.where(func.lower(Room.description).like(f"%{q.lower()}%"))
    return list(db.execute(stmt.order_by(Room.id.asc())).scalars().all())


def get_room(db: Session, room_id: int) -> Room:
    if room_id <= 0:
        raise ResourceNotFoundError("Room", room_id)
    room = db.get(Room, room_id)
    if not room or room.deleted_at is not None:
        raise ResourceNotFoundError("Room", room_id)
    return room


def get_room_by_number(db: Session, room_number: str, include_deleted: bool = False) -> Room | None:
    stmt = select(Room).where(Room.room_number == room_number)
    if not include_deleted:
        stmt = stmt.where(Room.deleted_at.is_(None))
    return db.execute(stmt).scalar_one_or_none()


def create_room(db: Session, body: RoomCreate, actor_id: int | None = None) -> Room:
    # soft-deleted rooms keep their number: the column is unique in storage
    if get_room_by_number(db, body.roomNumber, include_deleted=True):
        raise ConflictError(f"Room with number {body.roomNumber} already exists")
    room = Room(**{_FIELDS[k]: _column_value(k, v) for k, v in body.model_dump().items()})
    db.add(room)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Room with number {body.roomNumber} already exists")
    log_audit(db, actor_id, "room.create", "room", room.id, {"roomNumber": room.room_number})
    db.commit()
    db.refresh(room)
    logger.info("room %s created (id=%s)", room.room_number, room.id)
    return room


def update_room(db: Session, room_id: int, body: RoomUpdate, actor_id: int | None = None) -> Room:
    room = get_room(db, room_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    new_number = changes.get("roomNumber")
    if new_number and new_number != room.room_number:
        if get_room_by_number(db, new_number, include_deleted=True):
            raise ConflictError(f"Room with number {new_number} already exists")
    for k, v in changes.items():
        setattr(room, _FIELDS[k], _column_value(k, v))
    log_audit(db, actor_id, "room.update", "room", room.id, changes)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Room with number {new_number} already exists")
    db.refresh(room)
    return room


def update_availability(db: Session, room_id: int, status: AvailabilityStatus, actor_id: int | None = None) -> Room:
    room = get_room(db, room_id)
    previous = room.availability_status
    room.availability_status = AvailabilityStatus(status).value
    log_audit(db, actor_id, "room.availability", "room", room.id, {"from": previous, "to": room.availability_status})
    db.commit()
    db.refresh(room)
    logger.info("room %s availability %s -> %s", room.id, previous, room.availability_status)
    return room


def delete_room(db: Session, room_id: int, actor_id: int | None = None) -> None:
    """Soft delete: the row stays for booking history, lookups by id then 404."""
    room = get_room(db, room_id)
    room.deleted_at = datetime.now(timezone.utc)
    log_audit(db, actor_id, "room.delete", "room", room.id, {"roomNumber": room.room_number})
    db.commit()

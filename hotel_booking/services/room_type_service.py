from sqlalchemy import select
from sqlalchemy.orm import Session

from hotel_booking.core.errors import ConflictError, ResourceNotFoundError
from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.room_type import RoomType
from hotel_booking.schemas.room_type import RoomTypeCreate, RoomTypeUpdate
from hotel_booking.services.audit_service import log_audit

_FIELDS = {
    "name": "name",
    "code": "code",
    "description": "description",
    "pricePerNight": "price_per_night",
    "maxGuests": "max_guests",
    "imageUrl": "image_url",
    "amenities": "amenities",
    "displayOrder": "display_order",
}


def list_room_types(db: Session) -> list[RoomType]:
    stmt = select(RoomType).order_by(RoomType.display_order.asc(), RoomType.id.asc())
    return list(db.execute(stmt).scalars().all())


def get_room_type(db: Session, type_id: int) -> RoomType:
    t = db.get(RoomType, type_id)
    if not t:
        raise ResourceNotFoundError("RoomType", type_id)
    return t


def get_room_type_by_code(db: Session, code: str) -> RoomType:
    t = db.execute(select(RoomType).where(RoomType.code == code.lower())).scalar_one_or_none()
    if not t:
        raise ResourceNotFoundError("RoomType", code)
    return t


def _ensure_unique(db: Session, code: str | None, name: str | None, exclude_id: int | None = None):
    if code:
        other = db.execute(select(RoomType).where(RoomType.code == code)).scalar_one_or_none()
        if other and other.id != exclude_id:
            raise ConflictError(f"Room type with code {code} already exists")
    if name:
        other = db.execute(select(RoomType).where(RoomType.name == name)).scalar_one_or_none()
        if other and other.id != exclude_id:
            raise ConflictError(f"Room type with name {name} already exists")


def create_room_type(db: Session, body: RoomTypeCreate, actor_id: int | None = None) -> RoomType:
    _ensure_unique(db, body.code, body.name)
    data = body.model_dump()
    data["amenities"] = AmenitySet.parse(data["amenities"])
    t = RoomType(**{_FIELDS[k]: v for k, v in data.items()})
    db.add(t)
    db.flush()
    log_audit(db, actor_id, "room_type.create", "room_type", t.id, {"code": t.code})
    db.commit()
    db.refresh(t)
    return t


def update_room_type(db: Session, type_id: int, body: RoomTypeUpdate, actor_id: int | None = None) -> RoomType:
    t = get_room_type(db, type_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    _ensure_unique(db, changes.get("code"), changes.get("name"), exclude_id=t.id)
    for k, v in changes.items():
        setattr(t, _FIELDS[k], AmenitySet.parse(v) if k == "amenities" else v)
    log_audit(db, actor_id, "room_type.update", "room_type", t.id, changes)
    db.commit()
    db.refresh(t)
    return t


def delete_room_type(db: Session, type_id: int, actor_id: int | None = None) -> None:
    t = get_room_type(db, type_id)
    log_audit(db, actor_id, "room_type.delete", "room_type", t.id, {"code": t.code})
    db.delete(t)
    db.commit()

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from hotel_booking.api.deps import require_admin
from hotel_booking.core.errors import ValidationError
from hotel_booking.db.session import get_db
from hotel_booking.models.user import User
from hotel_booking.schemas.booking import BookingOut
from hotel_booking.schemas.room import RoomAvailabilityUpdate, RoomCreate, RoomOut, RoomSearchCriteria, RoomUpdate
from hotel_booking.services import availability, booking_service, room_service

router = APIRouter(tags=["rooms"])


def _criteria(**params) -> RoomSearchCriteria:
    try:
        return RoomSearchCriteria(**params)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid search parameters",
            [{"field": ".".join(str(x) for x in err["loc"]) or "query", "message": err["msg"]} for err in e.errors()],
        )


@router.get("/rooms", response_model=List[RoomOut])
def list_rooms(q: Optional[str] = None, db: Session = Depends(get_db)):
    return [RoomOut.of(r) for r in room_service.list_rooms(db, q)]


@router.get("/rooms/search", response_model=List[RoomOut])
def search_rooms(
    checkInDate: Optional[str] = None,
    checkOutDate: Optional[str] = None,
    roomType: Optional[str] = None,
    maxGuests: Optional[int] = None,
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    amenities: Optional[List[str]] = Query(None),
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    db: Session = Depends(get_db),
):
    criteria = _criteria(
        checkInDate=checkInDate,
        checkOutDate=checkOutDate,
        roomType=roomType,
        maxGuests=maxGuests,
        minPrice=minPrice,
        maxPrice=maxPrice,
        amenities=amenities,
        sortBy=sortBy,
        sortOrder=sortOrder,
    )
    return [RoomOut.of(r) for r in availability.search_available_rooms(db, criteria)]


@router.get("/rooms/available", response_model=List[RoomOut])
def available_rooms(
    checkInDate: Optional[str] = None,
    checkOutDate: Optional[str] = None,
    roomType: Optional[str] = None,
    maxGuests: Optional[int] = None,
    maxPrice: Optional[float] = None,
    db: Session = Depends(get_db),
):
    c = _criteria(checkInDate=checkInDate, checkOutDate=checkOutDate, roomType=roomType,
                  maxGuests=maxGuests, maxPrice=maxPrice)
    rooms = availability.find_available_rooms(db, c.checkInDate, c.checkOutDate, c.roomType, c.maxGuests, c.maxPrice)
    return [RoomOut.of(r) for r in rooms]


@router.get("/rooms/{room_id}", response_model=RoomOut)
def get_room(room_id: int, db: Session = Depends(get_db)):
    return RoomOut.of(room_service.get_room(db, room_id))


@router.get("/rooms/{room_id}/bookings", response_model=List[BookingOut])
def room_bookings(room_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    room = room_service.get_room(db, room_id)
    return [BookingOut.of(b) for b in booking_service.list_bookings_for_room(db, room.id)]


@router.post("/rooms", response_model=RoomOut, status_code=201)
def create_room(body: RoomCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return RoomOut.of(room_service.create_room(db, body, actor_id=me.id))


@router.patch("/rooms/{room_id}", response_model=RoomOut)
def update_room(room_id: int, body: RoomUpdate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return RoomOut.of(room_service.update_room(db, room_id, body, actor_id=me.id))


@router.patch("/rooms/{room_id}/availability", response_model=RoomOut)
def update_availability(room_id: int, body: RoomAvailabilityUpdate, db: Session = Depends(get_db),
                        me: User = Depends(require_admin)):
    return RoomOut.of(room_service.update_availability(db, room_id, body.availabilityStatus, actor_id=me.id))


@router.delete("/rooms/{room_id}", status_code=204)
def delete_room(room_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    room_service.delete_room(db, room_id, actor_id=me.id)
    return Response(status_code=204)

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hotel_booking.api.deps import ensure_owner_or_admin, get_current_user, is_admin, require_admin
from hotel_booking.db.session import get_db
from hotel_booking.models.enums import BookingStatus
from hotel_booking.models.user import User
from hotel_booking.schemas.booking import BookingCreate, BookingOut, BookingUpdate
from hotel_booking.services import booking_service

router = APIRouter(tags=["bookings"])


@router.post("/bookings", response_model=BookingOut, status_code=201)
def create_booking(body: BookingCreate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    # only admins book on behalf of someone else
    user_id = body.userId if (body.userId and is_admin(me)) else me.id
    b = booking_service.create_booking(
        db,
        user_id=user_id,
        room_id=body.roomId,
        check_in=body.checkInDate,
        check_out=body.checkOutDate,
        number_of_guests=body.numberOfGuests,
        special_requests=body.specialRequests,
        actor_id=me.id,
    )
    return BookingOut.of(*booking_service.get_booking_detail(db, b.id))


@router.get("/bookings", response_model=List[BookingOut])
def list_bookings(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    user_id = None if is_admin(me) else me.id
    return [BookingOut.of(b) for b in booking_service.list_bookings(db, user_id)]


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.get_booking(db, booking_id)
    ensure_owner_or_admin(me, b.user_id)
    return BookingOut.of(*booking_service.get_booking_detail(db, b.id))


@router.patch("/bookings/{booking_id}", response_model=BookingOut)
def update_booking(booking_id: int, body: BookingUpdate, db: Session = Depends(get_db),
                   me: User = Depends(get_current_user)):
    b = booking_service.get_booking(db, booking_id)
    ensure_owner_or_admin(me, b.user_id)
    if body.status is not None and not is_admin(me) and body.status.value not in (b.status, BookingStatus.CANCELLED.value):
        raise HTTPException(status_code=403, detail="Only admins can confirm or complete bookings")
    b = booking_service.update_booking(db, b.id, body.model_dump(exclude_unset=True), actor_id=me.id)
    return BookingOut.of(*booking_service.get_booking_detail(db, b.id))


@router.delete("/bookings/{booking_id}", response_model=BookingOut)
def cancel_booking(booking_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    b = booking_service.cancel_booking(db, booking_id, actor_id=me.id)
    return BookingOut.of(*booking_service.get_booking_detail(db, b.id))

from typing import List
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from hotel_booking.api.deps import require_admin
from hotel_booking.db.session import get_db
from hotel_booking.models.user import User
from hotel_booking.schemas.room_type import RoomTypeCreate, RoomTypeOut, RoomTypeUpdate
from hotel_booking.services import room_type_service

router = APIRouter(tags=["room-types"])


@router.get("/room-types", response_model=List[RoomTypeOut])
def list_room_types(db: Session = Depends(get_db)):
    return [RoomTypeOut.of(t) for t in room_type_service.list_room_types(db)]


@router.get("/room-types/code/{code}", response_model=RoomTypeOut)
def get_by_code(code: str, db: Session = Depends(get_db)):
    return RoomTypeOut.of(room_type_service.get_room_type_by_code(db, code))


@router.get("/room-types/{type_id}", response_model=RoomTypeOut)
def get_room_type(type_id: int, db: Session = Depends(get_db)):
    return RoomTypeOut.of(room_type_service.get_room_type(db, type_id))


@router.post("/room-types", response_model=RoomTypeOut, status_code=201)
def create_room_type(body: RoomTypeCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return RoomTypeOut.of(room_type_service.create_room_type(db, body, actor_id=me.id))


@router.patch("/room-types/{type_id}", response_model=RoomTypeOut)
def update_room_type(type_id: int, body: RoomTypeUpdate, db: Session = Depends(get_db),
                     me: User = Depends(require_admin)):
    return RoomTypeOut.of(room_type_service.update_room_type(db, type_id, body, actor_id=me.id))


@router.delete("/room-types/{type_id}", status_code=204)
def delete_room_type(type_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    room_type_service.delete_room_type(db, type_id, actor_id=me.id)
    return Response(status_code=204)

from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from hotel_booking.core.dates import as_utc, parse_datetime
from hotel_booking.models.booking import Booking
from hotel_booking.models.enums import BookingStatus
from hotel_booking.models.room import Room
from hotel_booking.models.user import User


class BookingCreate(BaseModel):
    roomId: int = Field(gt=0)
    userId: Optional[int] = Field(default=None, gt=0)  # honoured for admins only
    checkInDate: datetime
    checkOutDate: datetime
    numberOfGuests: int = Field(default=1, ge=1)
    specialRequests: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("checkInDate", "checkOutDate", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_datetime(v)


class BookingUpdate(BaseModel):
    roomId: Optional[int] = Field(default=None, gt=0)
    checkInDate: Optional[datetime] = None
    checkOutDate: Optional[datetime] = None
    numberOfGuests: Optional[int] = Field(default=None, ge=1)
    specialRequests: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[BookingStatus] = None

    @field_validator("checkInDate", "checkOutDate", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return None if v is None else parse_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class RoomSummary(BaseModel):
    id: int
    roomNumber: str
    type: str


class UserSummary(BaseModel):
    id: int
    email: str
    firstName: str
    lastName: str


class BookingOut(BaseModel):
    id: int
    userId: int
    roomId: int
    checkInDate: str
    checkOutDate: str
    numberOfGuests: int
    status: str
    specialRequests: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    room: Optional[RoomSummary] = None
    user: Optional[UserSummary] = None

    @classmethod
    def of(cls, b: Booking, room: Room | None = None, user: User | None = None) -> "BookingOut":
        return cls(
            id=b.id,
            userId=b.user_id,
            roomId=b.room_id,
            checkInDate=as_utc(b.check_in_date).isoformat(),
            checkOutDate=as_utc(b.check_out_date).isoformat(),
            numberOfGuests=b.number_of_guests,
            status=b.status,
            specialRequests=b.special_requests,
            createdAt=b.created_at.isoformat() if b.created_at else None,
            updatedAt=b.updated_at.isoformat() if b.updated_at else None,
            room=RoomSummary(id=room.id, roomNumber=room.room_number, type=room.room_type) if room else None,
            user=UserSummary(id=user.id, email=user.email, firstName=user.first_name or "",
                             lastName=user.last_name or "") if user else None,
        )

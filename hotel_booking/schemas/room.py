from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hotel_booking.core.dates import parse_datetime
from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.enums import AvailabilityStatus, RoomKind
from hotel_booking.models.room import Room


def _lower(v):
    return v.strip().lower() if isinstance(v, str) else v


def _check_amenities(v):
    if v is not None:
        AmenitySet.parse(v)
    return v


class RoomCreate(BaseModel):
    roomNumber: str = Field(min_length=1, max_length=20)
    type: RoomKind = RoomKind.SINGLE
    pricePerNight: float = Field(ge=0)
    maxGuests: int = Field(ge=1)
    description: Optional[str] = None
    amenities: Optional[List[str] | str] = None  # list of tags or a JSON array string
    availabilityStatus: AvailabilityStatus = AvailabilityStatus.AVAILABLE

    @field_validator("type", "availabilityStatus", mode="before")
    @classmethod
    def lower_enums(cls, v):
        return _lower(v)

    @field_validator("roomNumber")
    @classmethod
    def strip_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("room number is required")
        return v

    @field_validator("amenities")
    @classmethod
    def check_amenities(cls, v):
        return _check_amenities(v)


class RoomUpdate(BaseModel):
    roomNumber: Optional[str] = Field(default=None, min_length=1, max_length=20)
    type: Optional[RoomKind] = None
    pricePerNight: Optional[float] = Field(default=None, ge=0)
    maxGuests: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    amenities: Optional[List[str] | str] = None
    availabilityStatus: Optional[AvailabilityStatus] = None

    @field_validator("type", "availabilityStatus", mode="before")
    @classmethod
    def lower_enums(cls, v):
        return _lower(v)

    @field_validator("amenities")
    @classmethod
    def check_amenities(cls, v):
        return _check_amenities(v)


class RoomAvailabilityUpdate(BaseModel):
    availabilityStatus: AvailabilityStatus

    @field_validator("availabilityStatus", mode="before")
    @classmethod
    def lower_enums(cls, v):
        return _lower(v)


class RoomOut(BaseModel):
    id: int
    roomNumber: str
    type: str
    pricePerNight: float
    maxGuests: int
    description: Optional[str] = None
    amenities: List[str] = []
    availabilityStatus: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @classmethod
    def of(cls, r: Room) -> "RoomOut":
        return cls(
            id=r.id,
            roomNumber=r.room_number,
            type=r.room_type,
            pricePerNight=round(float(r.price_per_night), 2),
            maxGuests=r.max_guests,
            description=r.description,
            amenities=AmenitySet.parse(r.amenities).to_list(),
            availabilityStatus=r.availability_status,
            createdAt=r.created_at.isoformat() if r.created_at else None,
            updatedAt=r.updated_at.isoformat() if r.updated_at else None,
        )


class RoomSearchCriteria(BaseModel):
    """Availability search input. Omitted filters impose no constraint."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    checkInDate: datetime
    checkOutDate: datetime
    roomType: Optional[RoomKind] = None
    maxGuests: Optional[int] = Field(default=None, ge=1)
    minPrice: Optional[float] = Field(default=None, ge=0)
    maxPrice: Optional[float] = Field(default=None, ge=0)
    amenities: AmenitySet = Field(default_factory=AmenitySet)
    sortBy: Optional[Literal["price", "type", "maxGuests", "roomNumber"]] = None
    sortOrder: Literal["ASC", "DESC"] = "ASC"

    @field_validator("checkInDate", "checkOutDate", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return parse_datetime(v)

    @field_validator("roomType", mode="before")
    @classmethod
    def lower_type(cls, v):
        return _lower(v) or None

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v):
        return AmenitySet.parse(v)

    @field_validator("sortBy", mode="before")
    @classmethod
    def blank_sort_by(cls, v):
        return v or None

    @field_validator("sortOrder", mode="before")
    @classmethod
    def upper_sort_order(cls, v):
        return str(v).upper() if v else "ASC"

    @model_validator(mode="after")
    def check_stay(self):
        if self.checkOutDate <= self.checkInDate:
            raise ValueError("checkOutDate must be after checkInDate")
        return self

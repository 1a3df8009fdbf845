from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.room_type import RoomType


class RoomTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=40)
    description: str = ""
    pricePerNight: float = Field(ge=0)
    maxGuests: int = Field(ge=1)
    imageUrl: Optional[str] = None
    amenities: List[str] = []
    displayOrder: int = 1

    @field_validator("code")
    @classmethod
    def lower_code(cls, v: str) -> str:
        return v.strip().lower()


class RoomTypeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    code: Optional[str] = Field(default=None, min_length=1, max_length=40)
    description: Optional[str] = None
    pricePerNight: Optional[float] = Field(default=None, ge=0)
    maxGuests: Optional[int] = Field(default=None, ge=1)
    imageUrl: Optional[str] = None
    amenities: Optional[List[str]] = None
    displayOrder: Optional[int] = None

    @field_validator("code")
    @classmethod
    def lower_code(cls, v):
        return v.strip().lower() if v is not None else v


class RoomTypeOut(BaseModel):
    id: int
    name: str
    code: str
    description: str
    pricePerNight: float
    maxGuests: int
    imageUrl: Optional[str] = None
    amenities: List[str] = []
    displayOrder: int

    @classmethod
    def of(cls, t: RoomType) -> "RoomTypeOut":
        return cls(
            id=t.id,
            name=t.name,
            code=t.code,
            description=t.description or "",
            pricePerNight=round(float(t.price_per_night), 2),
            maxGuests=t.max_guests,
            imageUrl=t.image_url,
            amenities=AmenitySet.parse(t.amenities).to_list(),
            displayOrder=t.display_order,
        )

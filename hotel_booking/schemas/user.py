from pydantic import BaseModel, Field
from typing import Optional

from hotel_booking.models.enums import UserRole
from hotel_booking.models.user import User


class UserCreate(BaseModel):
    firstName: str = Field(min_length=1, max_length=100)
    lastName: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8)
    role: UserRole = UserRole.USER
    phoneNumber: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)


class UserUpdate(BaseModel):
    firstName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=320)
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[UserRole] = None
    phoneNumber: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)


class ProfileUpdate(BaseModel):
    """Self-service edits; email and role are not changeable here."""
    firstName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phoneNumber: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)


class UserOut(BaseModel):
    id: int
    firstName: str
    lastName: str
    email: str
    role: str
    phoneNumber: Optional[str] = None
    address: Optional[str] = None
    isActive: bool = True
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @classmethod
    def of(cls, u: User) -> "UserOut":
        return cls(
            id=u.id,
            firstName=u.first_name or "",
            lastName=u.last_name or "",
            email=u.email,
            role=u.role,
            phoneNumber=u.phone_number,
            address=u.address,
            isActive=u.is_active,
            createdAt=u.created_at.isoformat() if u.created_at else None,
            updatedAt=u.updated_at.isoformat() if u.updated_at else None,
        )

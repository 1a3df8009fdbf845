from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from hotel_booking.db.session import Base
from hotel_booking.models.amenity_set import AmenitySet, AmenitySetType

class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        Index("ix_rooms_type_price", "room_type", "price_per_night"),
        Index("ix_rooms_type_availability", "room_type", "availability_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    room_type: Mapped[str] = mapped_column(String(20), default="single", index=True)  # single, double, suite, deluxe
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    max_guests: Mapped[int] = mapped_column(Integer, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amenities: Mapped[AmenitySet] = mapped_column(AmenitySetType, nullable=True, default=lambda: AmenitySet())
    # operational state only; booking-derived availability is computed per search
    availability_status: Mapped[str] = mapped_column(String(20), default="available", index=True)  # available, occupied, maintenance, cleaning

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

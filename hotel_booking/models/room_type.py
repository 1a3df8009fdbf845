from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from hotel_booking.db.session import Base
from hotel_booking.models.amenity_set import AmenitySet, AmenitySetType

class RoomType(Base):
    __tablename__ = "room_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    code: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # single, double, suite, deluxe or custom
    description: Mapped[str] = mapped_column(Text, default="")
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    max_guests: Mapped[int] = mapped_column(Integer)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    amenities: Mapped[AmenitySet] = mapped_column(AmenitySetType, nullable=True, default=lambda: AmenitySet())
    display_order: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

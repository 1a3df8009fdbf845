from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError, ProgrammingError

from hotel_booking.db.session import SessionLocal
from hotel_booking.core.config import settings
from hotel_booking.core.security import hash_password
from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.enums import AvailabilityStatus, RoomKind, UserRole
from hotel_booking.models.room import Room
from hotel_booking.models.room_type import RoomType
from hotel_booking.models.user import User

ROOM_TYPES = [
    # code, name, price, max guests, amenities
    (RoomKind.SINGLE, "Single Room", "80.00", 1, ["wifi", "tv"]),
    (RoomKind.DOUBLE, "Double Room", "120.00", 2, ["wifi", "tv", "minibar"]),
    (RoomKind.SUITE, "Suite", "250.00", 4, ["wifi", "tv", "minibar", "balcony"]),
    (RoomKind.DELUXE, "Deluxe Room", "180.00", 3, ["wifi", "tv", "minibar", "bathtub"]),
]

ROOMS = [
    ("101", RoomKind.SINGLE, "80.00", 1, "Quiet single room facing the garden", ["wifi", "tv"]),
    ("102", RoomKind.DOUBLE, "120.00", 2, "Double room with city view", ["wifi", "tv", "minibar"]),
    ("201", RoomKind.DOUBLE, "130.00", 2, "Double room with balcony", ["wifi", "tv", "balcony"]),
    ("202", RoomKind.DELUXE, "180.00", 3, "Deluxe room with bathtub", ["wifi", "tv", "minibar", "bathtub"]),
    ("301", RoomKind.SUITE, "250.00", 4, "Corner suite with separate lounge", ["wifi", "tv", "minibar", "balcony"]),
]


def ensure_admin(db: Session, email: str, password: str):
    email = email.strip().lower()
    if db.execute(select(User).where(User.email == email)).scalar_one_or_none():
        return
    db.add(User(
        email=email,
        first_name="Admin",
        last_name="User",
        role=UserRole.ADMIN.value,
        password_hash=hash_password(password),
        token_version=0,
        is_active=True,
    ))
    db.commit()
    print(f"[seed] admin {email} created")


def run(db=None):
    own = db is None
    if own:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            print("[seed] users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_admin(db, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)

        created = 0
        for order, (kind, name, price, guests, amenities) in enumerate(ROOM_TYPES):
            if db.execute(select(RoomType).where(RoomType.code == kind.value)).scalar_one_or_none():
                continue
            db.add(RoomType(
                code=kind.value,
                name=name,
                price_per_night=Decimal(price),
                max_guests=guests,
                amenities=AmenitySet(amenities),
                display_order=order,
            ))
            created += 1
        db.commit()
        print(f"[seed] room types created: {created}")

        created = 0
        for number, kind, price, guests, description, amenities in ROOMS:
            if db.execute(select(Room).where(Room.room_number == number)).scalar_one_or_none():
                continue
            db.add(Room(
                room_number=number,
                room_type=kind.value,
                price_per_night=Decimal(price),
                max_guests=guests,
                description=description,
                amenities=AmenitySet(amenities),
                availability_status=AvailabilityStatus.AVAILABLE.value,
            ))
            created += 1
        db.commit()
        print(f"[seed] rooms created: {created}")
    finally:
        if own:
            db.close()


if __name__ == "__main__":
    run()

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hotel_booking.core.security import create_access_token
from hotel_booking.db.session import Base, get_db
from hotel_booking.main import app
from hotel_booking.models.amenity_set import AmenitySet
from hotel_booking.models.audit_log import AuditLog  # noqa: F401
from hotel_booking.models.booking import Booking
from hotel_booking.models.payment import Payment  # noqa: F401
from hotel_booking.models.refresh_token import RefreshToken  # noqa: F401
from hotel_booking.models.room import Room
from hotel_booking.models.room_type import RoomType  # noqa: F401
from hotel_booking.services import user_service

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def utc(y, m, d):
    return datetime(y, m, d, tzinfo=timezone.utc)


@pytest.fixture
def db():
    Base.metadata.create_all(engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email="guest@example.com", role="user", password="password123"):
    return user_service.create_user(db, first_name="Test", last_name="User", email=email,
                                    password=password, role=role)


def make_room(db, number="101", room_type="single", price="100.00", max_guests=2,
              status="available", amenities=(), description=None):
    room = Room(
        room_number=number,
        room_type=room_type,
        price_per_night=Decimal(price),
        max_guests=max_guests,
        description=description,
        amenities=AmenitySet(amenities),
        availability_status=status,
    )
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


def make_booking(db, room, user, check_in, check_out, status="confirmed", guests=1):
    b = Booking(
        room_id=room.id,
        user_id=user.id,
        check_in_date=check_in,
        check_out_date=check_out,
        number_of_guests=guests,
        status=status,
    )
    db.add(b)
    db.commit()
    db.refresh(b)
    return b


def auth_headers(user):
    token = create_access_token(user.id, user.email, user.role, user.token_version)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@hotel.local", role="admin")


@pytest.fixture
def guest(db):
    return make_user(db, email="guest@example.com")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def guest_headers(guest):
    return auth_headers(guest)

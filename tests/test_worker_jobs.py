from datetime import datetime, timedelta, timezone

from conftest import make_booking, make_room, make_user, utc
from hotel_booking.models.booking import Booking
from hotel_booking.models.refresh_token import RefreshToken
from hotel_booking.tasks import worker_jobs


def test_complete_past_bookings(db):
    guest = make_user(db)
    room = make_room(db, "101")
    past = make_booking(db, room, guest, utc(2024, 3, 1), utc(2024, 3, 5), status="confirmed")
    pending = make_booking(db, room, guest, utc(2024, 3, 6), utc(2024, 3, 8), status="pending")
    future = make_booking(db, room, guest, utc(2024, 6, 1), utc(2024, 6, 5), status="confirmed")

    result = worker_jobs.complete_past_bookings(db, now=utc(2024, 4, 1))
    assert result == {"completed": 1}
    db.expire_all()
    assert db.get(Booking, past.id).status == "completed"
    assert db.get(Booking, pending.id).status == "pending"
    assert db.get(Booking, future.id).status == "confirmed"


def test_purge_expired_refresh_tokens(db):
    guest = make_user(db)
    now = datetime.now(timezone.utc)
    db.add_all([
        RefreshToken(token="a" * 80, user_id=guest.id, is_active=True, expires_at=now - timedelta(days=1)),
        RefreshToken(token="b" * 80, user_id=guest.id, is_active=True, expires_at=now + timedelta(days=1)),
    ])
    db.commit()

    assert worker_jobs.purge_expired_refresh_tokens(db, now=now) == {"deactivated": 1}
    db.expire_all()
    active = db.query(RefreshToken).filter(RefreshToken.is_active == True).all()  # noqa: E712
    assert [t.token for t in active] == ["b" * 80]

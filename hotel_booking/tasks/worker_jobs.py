import logging
from datetime import datetime, timezone
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from sqlalchemy.exc import ProgrammingError
from hotel_booking.db.session import SessionLocal
from hotel_booking.models.booking import Booking
from hotel_booking.models.enums import BookingStatus
from hotel_booking.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)


def complete_past_bookings(db: Session | None = None, now: datetime | None = None) -> dict:
    """Confirmed stays whose check-out has passed become completed."""
    own = db is None
    db = db or SessionLocal()
    try:
        now = now or datetime.now(timezone.utc)
        try:
            done = db.execute(
                select(Booking).where(
                    Booking.status == BookingStatus.CONFIRMED.value,
                    Booking.check_out_date <= now,
                )
            ).scalars().all()
        except ProgrammingError:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        for b in done:
            b.status = BookingStatus.COMPLETED.value
        db.commit()
        if done:
            logger.info("completed %s past bookings", len(done))
        return {"completed": len(done)}
    finally:
        if own:
            db.close()


def purge_expired_refresh_tokens(db: Session | None = None, now: datetime | None = None) -> dict:
    own = db is None
    db = db or SessionLocal()
    try:
        now = now or datetime.now(timezone.utc)
        try:
            res = db.execute(
                update(RefreshToken)
                .where(RefreshToken.is_active == True, RefreshToken.expires_at <= now)  # noqa: E712
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
        except ProgrammingError:
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        db.commit()
        return {"deactivated": res.rowcount or 0}
    finally:
        if own:
            db.close()

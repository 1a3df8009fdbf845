import logging
import uuid
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.orm import Session

from hotel_booking.core.errors import PaymentProcessingError, ResourceNotFoundError
from hotel_booking.models.booking import Booking
from hotel_booking.models.enums import PaymentStatus
from hotel_booking.models.payment import Payment
from hotel_booking.schemas.payment import PaymentCreate
from hotel_booking.services.audit_service import log_audit

logger = logging.getLogger(__name__)

_FIELDS = {
    "amount": "amount",
    "paymentMethod": "payment_method",
    "currency": "currency",
    "transactionId": "transaction_id",
    "status": "status",
}


def _column_value(field: str, value):
    if field == "amount":
        return Decimal(str(value))
    if hasattr(value, "value"):
        return value.value
    return value


def make_transaction_id() -> str:
    return "TXN-" + uuid.uuid4().hex[:16].upper()


def list_payments(db: Session) -> list[Payment]:
    return list(db.execute(select(Payment).order_by(Payment.id.asc())).scalars().all())


def get_payment(db: Session, payment_id: int) -> Payment:
    p = db.get(Payment, payment_id) if payment_id > 0 else None
    if not p:
        raise ResourceNotFoundError("Payment", payment_id)
    return p


def list_payments_for_booking(db: Session, booking_id: int) -> list[Payment]:
    stmt = select(Payment).where(Payment.booking_id == booking_id).order_by(Payment.id.asc())
    return list(db.execute(stmt).scalars().all())


def create_payment(db: Session, body: PaymentCreate, actor_id: int | None = None) -> Payment:
    if not db.get(Booking, body.bookingId):
        raise ResourceNotFoundError("Booking", body.bookingId)
    p = Payment(
        booking_id=body.bookingId,
        amount=Decimal(str(body.amount)),
        currency=body.currency.value,
        payment_method=body.paymentMethod.value,
        transaction_id=body.transactionId or make_transaction_id(),
        status=body.status.value,
    )
    db.add(p)
    db.flush()
    log_audit(db, actor_id, "payment.create", "payment", p.id, {"bookingId": p.booking_id, "amount": str(p.amount)})
    db.commit()
    db.refresh(p)
    logger.info("payment %s recorded for booking %s", p.id, p.booking_id)
    return p


def update_payment(db: Session, payment_id: int, changes: dict, actor_id: int | None = None) -> Payment:
    p = get_payment(db, payment_id)
    for k, v in changes.items():
        if v is not None and k in _FIELDS:
            setattr(p, _FIELDS[k], _column_value(k, v))
    log_audit(db, actor_id, "payment.update", "payment", p.id, changes)
    db.commit()
    db.refresh(p)
    return p


def delete_payment(db: Session, payment_id: int, actor_id: int | None = None) -> None:
    p = get_payment(db, payment_id)
    db.delete(p)
    log_audit(db, actor_id, "payment.delete", "payment", payment_id)
    db.commit()


def process_refund(db: Session, payment_id: int, reason: str, actor_id: int | None = None) -> Payment:
    p = get_payment(db, payment_id)
    if p.status != PaymentStatus.COMPLETED.value:
        raise PaymentProcessingError(
            f"Only completed payments can be refunded (payment {p.id} is {p.status})",
            {"paymentId": p.id, "status": p.status},
        )
    p.status = PaymentStatus.REFUNDED.value
    p.refund_reason = reason
    log_audit(db, actor_id, "payment.refund", "payment", p.id, {"reason": reason})
    db.commit()
    db.refresh(p)
    logger.info("payment %s refunded", p.id)
    return p


def update_payment_status(db: Session, payment_id: int, status: PaymentStatus | str,
                          actor_id: int | None = None) -> Payment:
    p = get_payment(db, payment_id)
    previous = p.status
    p.status = PaymentStatus(status).value
    log_audit(db, actor_id, "payment.status", "payment", p.id, {"from": previous, "to": p.status})
    db.commit()
    db.refresh(p)
    return p

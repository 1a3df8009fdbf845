from typing import List
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from hotel_booking.api.deps import ensure_owner_or_admin, get_current_user, require_admin
from hotel_booking.db.session import get_db
from hotel_booking.models.user import User
from hotel_booking.schemas.payment import PaymentCreate, PaymentOut, PaymentStatusUpdate, PaymentUpdate, RefundRequest
from hotel_booking.services import booking_service, payment_service

router = APIRouter(tags=["payments"])


@router.get("/payments", response_model=List[PaymentOut])
def list_payments(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return [PaymentOut.of(p) for p in payment_service.list_payments(db)]


@router.get("/payments/booking/{booking_id}", response_model=List[PaymentOut])
def payments_for_booking(booking_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.get_booking(db, booking_id)
    ensure_owner_or_admin(me, b.user_id)
    return [PaymentOut.of(p) for p in payment_service.list_payments_for_booking(db, b.id)]


@router.get("/payments/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    p = payment_service.get_payment(db, payment_id)
    ensure_owner_or_admin(me, booking_service.get_booking(db, p.booking_id).user_id)
    return PaymentOut.of(p)


@router.post("/payments", response_model=PaymentOut, status_code=201)
def create_payment(body: PaymentCreate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    b = booking_service.get_booking(db, body.bookingId)
    ensure_owner_or_admin(me, b.user_id)
    return PaymentOut.of(payment_service.create_payment(db, body, actor_id=me.id))


@router.patch("/payments/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: int, body: PaymentUpdate, db: Session = Depends(get_db),
                   me: User = Depends(require_admin)):
    return PaymentOut.of(payment_service.update_payment(db, payment_id, body.model_dump(exclude_unset=True), actor_id=me.id))


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(payment_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    payment_service.delete_payment(db, payment_id, actor_id=me.id)
    return Response(status_code=204)


@router.post("/payments/{payment_id}/refund", response_model=PaymentOut)
def refund_payment(payment_id: int, body: RefundRequest, db: Session = Depends(get_db),
                   me: User = Depends(require_admin)):
    return PaymentOut.of(payment_service.process_refund(db, payment_id, body.refundReason, actor_id=me.id))


@router.patch("/payments/{payment_id}/status", response_model=PaymentOut)
def update_status(payment_id: int, body: PaymentStatusUpdate, db: Session = Depends(get_db),
                  me: User = Depends(require_admin)):
    return PaymentOut.of(payment_service.update_payment_status(db, payment_id, body.status, actor_id=me.id))

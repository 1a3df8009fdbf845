from pydantic import BaseModel, Field, field_validator
from typing import Optional

from hotel_booking.models.enums import Currency, PaymentMethod, PaymentStatus
from hotel_booking.models.payment import Payment


def _method(v):
    # "Credit Card" -> "credit_card"
    return "_".join(v.strip().lower().split()) if isinstance(v, str) else v


def _upper(v):
    return v.strip().upper() if isinstance(v, str) else v


def _lower(v):
    return v.strip().lower() if isinstance(v, str) else v


class PaymentCreate(BaseModel):
    bookingId: int = Field(gt=0)
    amount: float = Field(ge=0)
    paymentMethod: PaymentMethod
    currency: Currency = Currency.USD
    transactionId: Optional[str] = Field(default=None, max_length=120)
    status: PaymentStatus = PaymentStatus.PENDING

    @field_validator("paymentMethod", mode="before")
    @classmethod
    def normalize_method(cls, v):
        return _method(v)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v):
        return _upper(v)

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v):
        return _lower(v)


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0)
    paymentMethod: Optional[PaymentMethod] = None
    currency: Optional[Currency] = None
    transactionId: Optional[str] = Field(default=None, max_length=120)
    status: Optional[PaymentStatus] = None

    @field_validator("paymentMethod", mode="before")
    @classmethod
    def normalize_method(cls, v):
        return _method(v)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v):
        return _upper(v)

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v):
        return _lower(v)


class RefundRequest(BaseModel):
    refundReason: str = Field(min_length=1, max_length=500)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v):
        return _lower(v)


class PaymentOut(BaseModel):
    id: int
    bookingId: int
    amount: float
    currency: str
    paymentMethod: str
    transactionId: str
    status: str
    refundReason: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @classmethod
    def of(cls, p: Payment) -> "PaymentOut":
        return cls(
            id=p.id,
            bookingId=p.booking_id,
            amount=float(p.amount),
            currency=p.currency,
            paymentMethod=p.payment_method,
            transactionId=p.transaction_id or "",
            status=p.status,
            refundReason=p.refund_reason,
            createdAt=p.created_at.isoformat() if p.created_at else None,
            updatedAt=p.updated_at.isoformat() if p.updated_at else None,
        )

from datetime import datetime, timezone
from typing import Any


class HotelBookingError(Exception):
    """Base for errors the API renders as a structured JSON body."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.code}
        if self.details is not None:
            error["details"] = self.details
        return {
            "message": self.message,
            "statusCode": self.status_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": error,
        }


class ResourceNotFoundError(HotelBookingError):
    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, ident: Any):
        super().__init__(f"{resource} with ID {ident} not found")
        self.resource = resource


class ValidationError(HotelBookingError):
    status_code = 400
    code = "VALIDATION_ERROR"


class BookingValidationError(ValidationError):
    code = "BOOKING_VALIDATION_ERROR"


class ConflictError(HotelBookingError):
    status_code = 409
    code = "CONFLICT"


class RoomUnavailableError(ConflictError):
    code = "ROOM_UNAVAILABLE"


class PaymentProcessingError(HotelBookingError):
    status_code = 400
    code = "PAYMENT_ERROR"


class StorageError(HotelBookingError):
    """The data store failed or was unreachable. Never means "no rows"."""

    status_code = 503
    code = "DATABASE_ERROR"

    def __init__(self, message: str, cause: Exception | None = None):
        # the driver message can carry SQL and connection details; it is logged, never returned
        super().__init__(message, details=None)
        self.cause = cause

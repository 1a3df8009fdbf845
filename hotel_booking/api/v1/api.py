from fastapi import APIRouter
from hotel_booking.core.config import settings
from hotel_booking.api.v1.routes.auth import router as auth_router
from hotel_booking.api.v1.routes.users import router as users_router
from hotel_booking.api.v1.routes.rooms import router as rooms_router
from hotel_booking.api.v1.routes.room_types import router as room_types_router
from hotel_booking.api.v1.routes.bookings import router as bookings_router
from hotel_booking.api.v1.routes.payments import router as payments_router

api_router = APIRouter(prefix=settings.API_PREFIX)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(rooms_router)
api_router.include_router(room_types_router)
api_router.include_router(bookings_router)
api_router.include_router(payments_router)

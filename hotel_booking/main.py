import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from hotel_booking.core.config import settings
from hotel_booking.core.errors import HotelBookingError, StorageError, ValidationError
from hotel_booking.api.v1.api import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = [
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:5173", "http://localhost:5173",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HotelBookingError)
def handle_domain_error(request: Request, exc: HotelBookingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def handle_request_validation(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(x) for x in err.get("loc", ()) if x not in ("body", "query", "path")), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return handle_domain_error(request, ValidationError("Invalid request", details))


@app.exception_handler(SQLAlchemyError)
def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.exception("database error on %s %s", request.method, request.url.path, exc_info=exc)
    return handle_domain_error(request, StorageError("Database operation failed", exc))


app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok"}

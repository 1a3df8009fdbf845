from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from hotel_booking.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """rediss:// brokers need ssl_cert_reqs in the query string."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "hotel_booking",
    broker=_redis_url,
    backend=_redis_url,
    include=["hotel_booking.tasks.jobs"],
)

celery.conf.timezone = "UTC"

celery.conf.beat_schedule = {
    "complete-past-bookings-hourly": {
        "task": "hotel_booking.tasks.jobs.complete_past_bookings",
        "schedule": 3600.0,
    },
    "purge-expired-refresh-tokens-daily": {
        "task": "hotel_booking.tasks.jobs.purge_expired_refresh_tokens",
        "schedule": 86400.0,
    },
}

from hotel_booking.tasks.celery_app import celery
from hotel_booking.tasks import worker_jobs


@celery.task(name="hotel_booking.tasks.jobs.complete_past_bookings")
def complete_past_bookings():
    return worker_jobs.complete_past_bookings()


@celery.task(name="hotel_booking.tasks.jobs.purge_expired_refresh_tokens")
def purge_expired_refresh_tokens():
    return worker_jobs.purge_expired_refresh_tokens()

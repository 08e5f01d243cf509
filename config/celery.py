import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("campgo")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel pending bookings that were never paid - every 15 minutes
    "expire-unpaid-bookings": {
        "task": "bookings.expire_unpaid_bookings",
        "schedule": crontab(minute="*/15"),
    },
    # Complete confirmed bookings after checkout - every hour
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),
    },
    # Retry checkout links the provider failed to issue - every 10 minutes
    "retry-missing-payment-links": {
        "task": "finances.retry_missing_payment_links",
        "schedule": crontab(minute="*/10"),
        "options": {"expires": 540},
    },
}

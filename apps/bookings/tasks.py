"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import DomainError

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
)
from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_unpaid_bookings")
def expire_unpaid_bookings() -> dict[str, int]:
    """
    Cancel pending bookings that were never paid.

    A booking left in PENDING without payment for longer than
    ``BOOKING_PAYMENT_TIMEOUT_HOURS`` is cancelled by the system and its
    nights go back on sale.

    Returns:
        dict: {"expired": number of cancelled bookings}
    """
    cutoff = timezone.now() - timedelta(hours=settings.BOOKING_PAYMENT_TIMEOUT_HOURS)
    expired_count = 0

    stale_ids = list(
        Booking.objects.filter(
            status=Booking.Status.PENDING,
            created_at__lte=cutoff,
        )
        .exclude(payment_status=Booking.PaymentStatus.PAID)
        .values_list("id", flat=True)
    )

    handler = CancelBookingHandler()
    for booking_id in stale_ids:
        try:
            handler.handle(
                CancelBookingCommand(
                    booking_id=booking_id,
                    actor_id=None,
                    reason=f"Payment not received within {settings.BOOKING_PAYMENT_TIMEOUT_HOURS} hours",
                )
            )
            expired_count += 1
        except DomainError as e:
            # Paid or cancelled between the query and the lock
            logger.warning(f"Skipping expiry of booking {booking_id}: {e.code}")

    if expired_count > 0:
        logger.info(f"Expired {expired_count} unpaid bookings")

    return {"expired": expired_count}


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete confirmed bookings whose check-out date has been reached.

    Completion releases the calendar and opens the review window.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    today = timezone.localdate()
    completed_count = 0

    finished_ids = list(
        Booking.objects.filter(
            status=Booking.Status.CONFIRMED,
            check_out__lte=today,
        ).values_list("id", flat=True)
    )

    handler = CompleteBookingHandler()
    for booking_id in finished_ids:
        try:
            handler.handle(CompleteBookingCommand(booking_id=booking_id, today=today))
            completed_count += 1
        except DomainError as e:
            logger.warning(f"Skipping completion of booking {booking_id}: {e.code}")

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}

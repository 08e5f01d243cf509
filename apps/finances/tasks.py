"""Celery tasks for the finance domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .gateway import PaymentGatewayError
from .services import request_payment_link

logger = logging.getLogger(__name__)


@shared_task(name="finances.retry_missing_payment_links")
def retry_missing_payment_links() -> dict[str, int]:
    """
    Request checkout links for live, unpaid bookings that have none.

    Covers bookings whose link request failed right after creation.

    Returns:
        dict: {"issued": links created, "failed": gateway errors}
    """
    issued = failed = 0

    booking_ids = Booking.objects.filter(
        status__in=[Booking.Status.PENDING, Booking.Status.CONFIRMED],
        checkout_url__isnull=True,
    ).exclude(payment_status=Booking.PaymentStatus.PAID).values_list("id", flat=True)

    for booking_id in list(booking_ids):
        try:
            if request_payment_link(booking_id):
                issued += 1
        except PaymentGatewayError as e:
            failed += 1
            logger.error(f"Retry of payment link for booking {booking_id} failed: {e}")

    if issued or failed:
        logger.info(f"Payment link retry: {issued} issued, {failed} failed")

    return {"issued": issued, "failed": failed}

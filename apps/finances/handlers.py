"""Event handlers wiring bookings to the payment provider."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCreated

from .gateway import PaymentGatewayError
from .services import request_payment_link

logger = logging.getLogger(__name__)


def issue_payment_link(event: BookingCreated) -> None:
    """Runs after the booking commit; a failure leaves ``checkout_url`` empty for the retry task."""
    try:
        request_payment_link(event.booking_id)
    except PaymentGatewayError as e:
        logger.error(f"Payment link for booking {event.booking_id} failed: {e}", exc_info=True)


def register_handlers() -> None:
    from shared.application.message_bus import message_bus

    message_bus.register_event_handler(BookingCreated, issue_payment_link)

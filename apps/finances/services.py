"""Payment processing services.

``request_payment_link`` asks the provider for a checkout session once a
booking exists. ``apply_callback`` reconciles provider callbacks with
booking payment state; it never raises, every outcome is reported as a
``ReconciliationResult`` and recorded as a ``PaymentTransaction``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from django.conf import settings  # type: ignore

from apps.bookings.models import Booking
from shared.application.uow import DjangoUnitOfWork

from .gateway import PaymentGateway, get_gateway
from .models import PaymentTransaction

logger = logging.getLogger(__name__)

PAID_STATUS = "PAID"


@dataclass(frozen=True)
class ReconciliationResult:
    success: bool
    code: str
    message: str
    booking_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _record(
    result: ReconciliationResult,
    outcome: str,
    payload: Any,
    order_code: int | None = None,
    provider_status: str = "",
    amount: int | None = None,
) -> None:
    PaymentTransaction.objects.create(
        booking_id=result.booking_id,
        order_code=order_code,
        event=PaymentTransaction.Event.CALLBACK,
        provider_status=provider_status[:50],
        amount=amount,
        outcome=outcome,
        result_code=result.code,
        message=result.message[:255],
        payload=payload if isinstance(payload, dict) else {"raw": str(payload)},
    )


def _parse_order_code(data: dict[str, Any]) -> int | None:
    raw = data.get("orderCode", data.get("code"))
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _parse_amount(data: dict[str, Any]) -> int | None:
    try:
        return int(data["amount"])
    except (KeyError, TypeError, ValueError):
        return None


def apply_callback(payload: Any, gateway: PaymentGateway | None = None) -> ReconciliationResult:
    """Apply one provider callback to the booking it refers to."""
    try:
        return _apply_callback(payload, gateway or get_gateway())
    except Exception as e:  # noqa: BLE001
        logger.error(f"Error handling payment callback: {e}", exc_info=True)
        result = ReconciliationResult(False, "WEBHOOK_ERROR", str(e) or e.__class__.__name__)
        try:
            _record(result, PaymentTransaction.Outcome.REJECTED, payload)
        except Exception:  # noqa: BLE001
            logger.error("Could not record failed payment callback", exc_info=True)
        return result


def reject_malformed_callback(raw_body: bytes, reason: str = "") -> ReconciliationResult:
    """Record a callback whose body could not be parsed."""
    logger.warning(f"Malformed payment callback: {reason}")
    result = ReconciliationResult(False, "MALFORMED_PAYLOAD", "Callback body is not valid JSON.")
    _record(
        result,
        PaymentTransaction.Outcome.REJECTED,
        {"raw": raw_body.decode("utf-8", errors="replace")[:2000]},
    )
    return result


def _apply_callback(payload: Any, gateway: PaymentGateway) -> ReconciliationResult:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        data = {}

    order_code = _parse_order_code(data)
    if order_code is None:
        logger.warning(f"Payment callback without order code: {payload!r}")
        result = ReconciliationResult(False, "MISSING_ORDER_CODE", "Callback does not carry an order code.")
        _record(result, PaymentTransaction.Outcome.REJECTED, payload)
        return result

    provider_status = str(data.get("status") or "")
    amount = _parse_amount(data)

    if not gateway.verify_signature(data, payload.get("signature")):
        logger.warning(f"Invalid signature on payment callback for order {order_code}")
        result = ReconciliationResult(False, "INVALID_SIGNATURE", "Callback signature does not match.")
        _record(result, PaymentTransaction.Outcome.REJECTED, payload, order_code, provider_status, amount)
        return result

    paid = provider_status == PAID_STATUS or payload.get("success") is True

    with DjangoUnitOfWork() as uow:
        booking = Booking.objects.select_for_update().filter(payment_order_code=order_code).first()
        if booking is None:
            logger.warning(f"Payment callback for unknown order {order_code}")
            result = ReconciliationResult(False, "BOOKING_NOT_FOUND", f"No booking for order {order_code}.")
            _record(result, PaymentTransaction.Outcome.REJECTED, payload, order_code, provider_status, amount)
            return result

        if booking.payment_status in (Booking.PaymentStatus.PAID, Booking.PaymentStatus.REFUNDED):
            # A late "failed" must not downgrade a settled payment
            logger.info(f"Booking {booking.code} already paid, callback ignored")
            result = ReconciliationResult(True, "ALREADY_PAID", "Payment was already recorded.", booking.pk)
            _record(result, PaymentTransaction.Outcome.IGNORED, payload, order_code, provider_status, amount)
            return result

        if paid:
            booking.set_payment_status(Booking.PaymentStatus.PAID)
            booking.save(update_fields=["payment_status", "paid_at", "updated_at"])
            result = ReconciliationResult(True, "PAYMENT_SUCCESS", "Payment received.", booking.pk)
            outcome = PaymentTransaction.Outcome.APPLIED
            logger.info(f"Booking {booking.code} marked as paid (order {order_code})")
        elif booking.payment_status == Booking.PaymentStatus.FAILED:
            result = ReconciliationResult(False, "PAYMENT_FAILED", "Payment failed.", booking.pk)
            outcome = PaymentTransaction.Outcome.IGNORED
        else:
            booking.set_payment_status(Booking.PaymentStatus.FAILED)
            booking.save(update_fields=["payment_status", "updated_at"])
            result = ReconciliationResult(False, "PAYMENT_FAILED", "Payment failed.", booking.pk)
            outcome = PaymentTransaction.Outcome.APPLIED
            logger.warning(f"Payment failed for booking {booking.code} (order {order_code})")

        _record(result, outcome, payload, order_code, provider_status, amount)
        uow.collect_events(booking)

    return result


def request_payment_link(booking_id: int, gateway: PaymentGateway | None = None) -> str | None:
    """Create a checkout session for a booking and store its URL.

    Returns the URL, or None when the booking no longer needs one. Gateway
    failures propagate as ``PaymentGatewayError``.
    """
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        logger.warning(f"Cannot request payment link, booking {booking_id} not found")
        return None
    if booking.checkout_url:
        return booking.checkout_url
    if not booking.is_live or booking.payment_status == Booking.PaymentStatus.PAID:
        return None

    gateway = gateway or get_gateway()
    session = gateway.create_checkout(
        order_code=booking.payment_order_code,
        amount=booking.total,
        description=f"BOOKING {booking.code}",
        return_url=f"{settings.CLIENT_URL}/bookings/{booking.code}?payment=success",
        cancel_url=f"{settings.CLIENT_URL}/bookings/{booking.code}?payment=cancelled",
    )

    Booking.objects.filter(pk=booking.pk, checkout_url__isnull=True).update(checkout_url=session.checkout_url)
    PaymentTransaction.objects.create(
        booking=booking,
        order_code=booking.payment_order_code,
        event=PaymentTransaction.Event.CHECKOUT_CREATED,
        amount=booking.total,
        outcome=PaymentTransaction.Outcome.APPLIED,
        result_code="CHECKOUT_CREATED",
        payload={"checkout_url": session.checkout_url, "payment_link_id": session.payment_link_id},
    )
    logger.info(f"Payment link stored for booking {booking.code}")
    return session.checkout_url

"""Booking domain models for CampGO."""

from __future__ import annotations

import builtins
import secrets
from datetime import date

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import AggregateRoot

from .domain.entities import LIVE_STATUSES, BookingStatus, ensure_transition
from .domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingPaymentUpdated,
    BookingReviewed,
)
from .domain.pricing import PriceBreakdown


class Booking(AggregateRoot, models.Model):
    """Reservation of one site for a half-open range of nights.

    Bookings are never deleted; cancellation is a status change. The
    pricing columns are a snapshot taken at creation and are not touched by
    later tariff edits on the site.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Awaiting payment")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Payment failed")
        REFUNDED = "refunded", _("Refunded")

    class CancellationSource(models.TextChoices):
        GUEST = "guest", _("Guest")
        HOST = "host", _("Host")
        SYSTEM = "system", _("System")

    site = models.ForeignKey(
        "properties.Site",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="hosted_bookings",
        help_text=_("Owner of the property at booking time."),
    )
    code = models.CharField(max_length=16, unique=True, editable=False)

    check_in = models.DateField()
    check_out = models.DateField()
    nights = models.PositiveSmallIntegerField()
    guests = models.PositiveSmallIntegerField(default=1)
    pets = models.PositiveSmallIntegerField(default=0)
    vehicles = models.PositiveSmallIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_order_code = models.PositiveBigIntegerField(unique=True, editable=False)
    checkout_url = models.URLField(max_length=500, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    currency = models.CharField(max_length=3, default="VND")
    base_price = models.PositiveBigIntegerField()
    weekend_price = models.PositiveBigIntegerField(null=True, blank=True)
    weekday_nights = models.PositiveSmallIntegerField(default=0)
    weekend_nights = models.PositiveSmallIntegerField(default=0)
    subtotal = models.PositiveBigIntegerField()
    cleaning_fee = models.PositiveBigIntegerField(default=0)
    pet_fee = models.PositiveBigIntegerField(default=0)
    extra_guest_fee = models.PositiveBigIntegerField(default=0)
    service_fee = models.PositiveBigIntegerField(default=0)
    tax = models.PositiveBigIntegerField(default=0)
    total = models.PositiveBigIntegerField()

    guest_message = models.TextField(blank=True)
    host_message = models.TextField(blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_bookings",
    )
    cancellation_source = models.CharField(
        max_length=20,
        choices=CancellationSource.choices,
        blank=True,
    )
    cancellation_reason = models.CharField(max_length=500, blank=True)
    refund_amount = models.PositiveBigIntegerField(default=0)
    refunded_at = models.DateTimeField(null=True, blank=True)

    reviewed = models.BooleanField(default=False)
    review_id = models.PositiveBigIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["site", "status", "check_in", "check_out"], name="booking_site_window_idx"),
            models.Index(fields=["guest", "status"], name="booking_guest_status_idx"),
            models.Index(fields=["host", "status"], name="booking_host_status_idx"),
            models.Index(fields=["status", "payment_status", "created_at"], name="booking_payment_sweep_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.code} for site {self.site_id}"

    # --- Identity ---------------------------------------------------------

    @staticmethod
    def generate_code(on: date | None = None) -> str:
        """CG + ddmmyy + five random digits, e.g. CG19102681734."""
        on = on or timezone.localdate()
        return f"CG{on.strftime('%d%m%y')}{secrets.randbelow(100000):05d}"

    @staticmethod
    def generate_order_code() -> int:
        """Numeric reference the payment provider echoes back in callbacks."""
        millis = int(timezone.now().timestamp() * 1000)
        return millis * 100 + secrets.randbelow(100)

    # --- Queries ----------------------------------------------------------

    @builtins.property
    def is_live(self) -> bool:
        return BookingStatus(self.status) in LIVE_STATUSES

    def is_party(self, user_id: int | None) -> bool:
        return user_id is not None and user_id in (self.guest_id, self.host_id)

    def apply_pricing(self, breakdown: PriceBreakdown) -> None:
        for field, value in breakdown.as_snapshot().items():
            setattr(self, field, value)

    # --- Transitions ------------------------------------------------------

    def confirm(self, host_message: str = "", pricing: PriceBreakdown | None = None, instant: bool = False) -> None:
        ensure_transition(self.status, self.Status.CONFIRMED)
        self.status = self.Status.CONFIRMED
        self.confirmed_at = timezone.now()
        if host_message:
            self.host_message = host_message
        if pricing is not None:
            self.apply_pricing(pricing)
        self.add_event(
            BookingConfirmed(
                aggregate_id=self.pk,
                booking_id=self.pk,
                site_id=self.site_id,
                host_id=self.host_id,
                instant=instant,
            )
        )

    def cancel(self, source: str, cancelled_by_id: int | None, reason: str = "", refund: int = 0) -> None:
        old_status = self.status
        ensure_transition(self.status, self.Status.CANCELLED)
        self.status = self.Status.CANCELLED
        self.cancellation_source = source
        self.cancelled_by_id = cancelled_by_id
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.refund_amount = refund
        self.add_event(
            BookingCancelled(
                aggregate_id=self.pk,
                booking_id=self.pk,
                site_id=self.site_id,
                source=source,
                cancelled_by_id=cancelled_by_id,
                refund_amount=refund,
                old_status=old_status,
            )
        )

    def complete(self) -> None:
        ensure_transition(self.status, self.Status.COMPLETED)
        self.status = self.Status.COMPLETED
        self.completed_at = timezone.now()
        self.add_event(
            BookingCompleted(
                aggregate_id=self.pk,
                booking_id=self.pk,
                site_id=self.site_id,
                guest_id=self.guest_id,
            )
        )

    def mark_reviewed(self, review_id: int) -> None:
        self.reviewed = True
        self.review_id = review_id
        self.add_event(BookingReviewed(aggregate_id=self.pk, booking_id=self.pk, review_id=review_id))

    def refund(self, amount: int) -> None:
        """Record money returned to the guest; the payment is settled as refunded."""
        self.refund_amount = amount
        self.refunded_at = timezone.now()
        self.set_payment_status(self.PaymentStatus.REFUNDED)

    def set_payment_status(self, payment_status: str) -> None:
        self.payment_status = payment_status
        if payment_status == self.PaymentStatus.PAID:
            self.paid_at = timezone.now()
        self.add_event(
            BookingPaymentUpdated(
                aggregate_id=self.pk,
                booking_id=self.pk,
                payment_status=payment_status,
            )
        )

"""Financial domain models for CampGO."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PaymentTransaction(models.Model):
    """Audit record of one payment provider callback.

    Written for every callback, including rejected and duplicate ones, so
    the payment history of a booking can be reconstructed.
    """

    class Event(models.TextChoices):
        CHECKOUT_CREATED = "checkout_created", _("Checkout link created")
        CALLBACK = "callback", _("Provider callback")

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Applied")
        IGNORED = "ignored", _("Ignored")
        REJECTED = "rejected", _("Rejected")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_transactions",
    )
    order_code = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)
    event = models.CharField(max_length=20, choices=Event.choices, default=Event.CALLBACK)
    provider = models.CharField(max_length=50, default="payos")
    provider_status = models.CharField(max_length=50, blank=True)
    amount = models.PositiveBigIntegerField(null=True, blank=True)
    outcome = models.CharField(max_length=20, choices=Outcome.choices)
    result_code = models.CharField(max_length=50)
    message = models.CharField(max_length=255, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.provider} {self.event} #{self.order_code} -> {self.result_code}"

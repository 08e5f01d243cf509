"""Tests for payment callback reconciliation."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.models import Booking
from apps.bookings.tests.helpers import future, make_site, make_user
from apps.finances.gateway import PayOSGateway, generate_signature
from apps.finances.models import PaymentTransaction
from apps.finances.services import apply_callback


class PaymentWebhookTests(APITestCase):
    def setUp(self) -> None:
        site = make_site()
        self.booking = CreateBookingHandler().handle(
            CreateBookingCommand(
                site_id=site.pk,
                guest_id=make_user().pk,
                check_in=future(5),
                check_out=future(7),
            )
        )
        self.url = reverse("payment-webhook")

    def callback(self, provider_status: str = "PAID", **data) -> dict:
        data = {"orderCode": self.booking.payment_order_code, "amount": self.booking.total, "status": provider_status, **data}
        return {"code": "00", "success": provider_status == "PAID", "data": data}

    def test_paid_callback_marks_booking_paid(self) -> None:
        response = self.client.post(self.url, self.callback(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "PAYMENT_SUCCESS")
        self.assertTrue(response.data["success"])
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertIsNotNone(self.booking.paid_at)

    def test_repeated_callbacks_are_idempotent(self) -> None:
        self.client.post(self.url, self.callback(), format="json")
        paid_at = Booking.objects.get(pk=self.booking.pk).paid_at

        again = self.client.post(self.url, self.callback(), format="json")
        failed = self.client.post(self.url, self.callback("CANCELLED"), format="json")

        self.assertEqual(again.data["code"], "ALREADY_PAID")
        self.assertEqual(failed.data["code"], "ALREADY_PAID")
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(self.booking.paid_at, paid_at)
        self.assertEqual(
            list(
                PaymentTransaction.objects.filter(booking=self.booking)
                .order_by("id")
                .values_list("outcome", flat=True)
            ),
            [
                PaymentTransaction.Outcome.APPLIED,
                PaymentTransaction.Outcome.IGNORED,
                PaymentTransaction.Outcome.IGNORED,
            ],
        )

    def test_refunded_booking_ignores_late_callbacks(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(payment_status=Booking.PaymentStatus.REFUNDED)

        response = self.client.post(self.url, self.callback(), format="json")

        self.assertEqual(response.data["code"], "ALREADY_PAID")
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).payment_status, Booking.PaymentStatus.REFUNDED)

    def test_failed_callback(self) -> None:
        response = self.client.post(self.url, self.callback("CANCELLED"), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "PAYMENT_FAILED")
        self.assertFalse(response.data["success"])
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).payment_status, Booking.PaymentStatus.FAILED)

    def test_legacy_code_field_is_accepted(self) -> None:
        payload = {"data": {"code": str(self.booking.payment_order_code), "status": "PAID"}}

        result = apply_callback(payload)

        self.assertEqual(result.code, "PAYMENT_SUCCESS")
        self.assertEqual(result.booking_id, self.booking.pk)

    def test_missing_order_code(self) -> None:
        response = self.client.post(self.url, {"data": {"status": "PAID"}}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "MISSING_ORDER_CODE")
        self.assertTrue(
            PaymentTransaction.objects.filter(result_code="MISSING_ORDER_CODE", booking__isnull=True).exists()
        )

    def test_malformed_body_still_answers_200(self) -> None:
        response = self.client.post(self.url, data="{not json", content_type="application/json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "MALFORMED_PAYLOAD")
        self.assertFalse(response.data["success"])
        record = PaymentTransaction.objects.get(result_code="MALFORMED_PAYLOAD")
        self.assertEqual(record.outcome, PaymentTransaction.Outcome.REJECTED)
        self.assertEqual(record.payload, {"raw": "{not json"})
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).payment_status, Booking.PaymentStatus.PENDING)

    def test_unsupported_content_type_still_answers_200(self) -> None:
        response = self.client.post(self.url, data="orderCode=1", content_type="text/plain")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "MALFORMED_PAYLOAD")

    def test_unknown_order(self) -> None:
        response = self.client.post(self.url, self.callback(orderCode=1), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["code"], "BOOKING_NOT_FOUND")
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).payment_status, Booking.PaymentStatus.PENDING)

    def test_signature_is_checked_when_key_configured(self) -> None:
        gateway = PayOSGateway(api_key="", checksum_key="secret")
        payload = self.callback()

        rejected = apply_callback(dict(payload, signature="bogus"), gateway=gateway)
        self.assertEqual(rejected.code, "INVALID_SIGNATURE")
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).payment_status, Booking.PaymentStatus.PENDING)

        signed = dict(payload, signature=generate_signature(payload["data"], "secret"))
        accepted = apply_callback(signed, gateway=gateway)
        self.assertEqual(accepted.code, "PAYMENT_SUCCESS")

    def test_every_callback_is_recorded(self) -> None:
        self.client.post(self.url, self.callback(), format="json")
        self.client.post(self.url, {"data": {}}, format="json")
        self.client.post(self.url, self.callback(orderCode=1), format="json")

        self.assertEqual(PaymentTransaction.objects.filter(event=PaymentTransaction.Event.CALLBACK).count(), 3)

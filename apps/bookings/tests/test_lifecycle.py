"""Tests for booking lifecycle commands and the calendar invariant."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    MarkReviewedCommand,
    MarkReviewedHandler,
    RefundBookingCommand,
    RefundBookingHandler,
)
from apps.bookings.domain.entities import can_transition, ensure_transition, is_terminal
from apps.bookings.domain.events import BookingConfirmed, BookingCreated
from apps.bookings.models import Booking
from apps.properties.models import SiteAvailability
from shared.application.message_bus import message_bus
from shared.domain.exceptions import BadRequest, Conflict, Forbidden, NotFound

from .helpers import future, make_site, make_user


class TransitionTableTests(SimpleTestCase):
    def test_legal_moves(self) -> None:
        self.assertTrue(can_transition("pending", "confirmed"))
        self.assertTrue(can_transition("pending", "cancelled"))
        self.assertTrue(can_transition("confirmed", "completed"))
        self.assertTrue(can_transition("confirmed", "cancelled"))

    def test_illegal_moves(self) -> None:
        self.assertFalse(can_transition("pending", "completed"))
        self.assertFalse(can_transition("cancelled", "confirmed"))
        self.assertFalse(can_transition("completed", "cancelled"))

    def test_terminal_states(self) -> None:
        self.assertTrue(is_terminal("cancelled"))
        self.assertTrue(is_terminal("completed"))
        self.assertFalse(is_terminal("pending"))

    def test_ensure_transition_reports_both_states(self) -> None:
        with self.assertRaises(BadRequest) as ctx:
            ensure_transition("completed", "confirmed")
        self.assertEqual(ctx.exception.code, "INVALID_STATUS_TRANSITION")
        self.assertEqual(ctx.exception.details, {"from": "completed", "to": "confirmed"})


class LifecycleTestCase(TestCase):
    def setUp(self) -> None:
        self.guest = make_user()
        self.site = make_site()
        self.host = self.site.property.host

    def create(self, check_in=None, nights: int = 2, **kwargs) -> Booking:
        check_in = check_in or future(10)
        return CreateBookingHandler().handle(
            CreateBookingCommand(
                site_id=self.site.pk,
                guest_id=kwargs.pop("guest_id", self.guest.pk),
                check_in=check_in,
                check_out=check_in + timedelta(days=nights),
                **kwargs,
            )
        )

    def booked_dates(self) -> list:
        return list(
            SiteAvailability.objects.filter(
                site=self.site,
                block_type=SiteAvailability.BlockType.BOOKED,
            )
            .order_by("date")
            .values_list("date", flat=True)
        )

    def live_booking_dates(self) -> list:
        dates = []
        for booking in Booking.objects.filter(site=self.site, status__in=["pending", "confirmed"]):
            day = booking.check_in
            while day < booking.check_out:
                dates.append(day)
                day += timedelta(days=1)
        return sorted(dates)

    def assertCalendarMatchesBookings(self) -> None:
        self.assertEqual(self.booked_dates(), self.live_booking_dates())


class CreateBookingTests(LifecycleTestCase):
    def test_creates_pending_booking_and_claims_nights(self) -> None:
        booking = self.create(nights=3, guests=2)

        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertEqual(booking.nights, 3)
        self.assertEqual(booking.host_id, self.host.pk)
        self.assertEqual(booking.property_id, self.site.property_id)
        self.assertEqual(booking.subtotal, 900_000)
        self.assertEqual(booking.total, 950_000)
        self.assertRegex(booking.code, r"^CG\d{11}$")
        self.assertEqual(len(self.booked_dates()), 3)
        self.assertCalendarMatchesBookings()

    def test_instant_book_confirms_immediately(self) -> None:
        self.site.instant_book = True
        self.site.save()

        booking = self.create()

        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertIsNotNone(booking.confirmed_at)
        self.assertCalendarMatchesBookings()

    def test_instant_book_publishes_confirmed_creation(self) -> None:
        self.site.instant_book = True
        self.site.save()

        with mock.patch.object(message_bus, "publish_events") as publish:
            with self.captureOnCommitCallbacks(execute=True):
                booking = self.create()

        events = list(publish.call_args.args[0])
        self.assertEqual([type(event) for event in events], [BookingCreated, BookingConfirmed])
        self.assertEqual(events[0].status, Booking.Status.CONFIRMED)
        self.assertEqual(events[0].total, booking.total)
        self.assertTrue(events[1].instant)

    def test_overlap_is_rejected(self) -> None:
        first = self.create(check_in=future(10), nights=3)

        with self.assertRaises(Conflict) as ctx:
            self.create(check_in=first.check_in + timedelta(days=2), nights=2)

        self.assertEqual(ctx.exception.code, "DATES_UNAVAILABLE")
        self.assertEqual(Booking.objects.count(), 1)
        self.assertCalendarMatchesBookings()

    def test_back_to_back_stays_are_allowed(self) -> None:
        first = self.create(check_in=future(10), nights=2)
        second = self.create(check_in=first.check_out, nights=2)

        self.assertEqual(second.check_in, first.check_out)
        self.assertCalendarMatchesBookings()

    def test_host_block_prevents_booking(self) -> None:
        SiteAvailability.objects.create(
            site=self.site,
            date=future(11),
            block_type=SiteAvailability.BlockType.MAINTENANCE,
        )

        with self.assertRaises(Conflict):
            self.create(check_in=future(10), nights=3)

    def test_missing_site(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            CreateBookingHandler().handle(
                CreateBookingCommand(site_id=999_999, guest_id=self.guest.pk, check_in=future(1), check_out=future(2))
            )
        self.assertEqual(ctx.exception.code, "SITE_NOT_FOUND")

    def test_capacity_and_policy_rules(self) -> None:
        cases = [
            ({"guests": 5}, "GUEST_LIMIT_EXCEEDED"),
            ({"pets": 2}, "PET_LIMIT_EXCEEDED"),
            ({"vehicles": 2}, "VEHICLE_LIMIT_EXCEEDED"),
            ({"nights": 15}, "STAY_TOO_LONG"),
        ]
        for kwargs, code in cases:
            with self.subTest(code=code):
                with self.assertRaises(BadRequest) as ctx:
                    self.create(**kwargs)
                self.assertEqual(ctx.exception.code, code)
        self.assertFalse(SiteAvailability.objects.exists())

    def test_pets_not_allowed_when_site_has_no_pet_capacity(self) -> None:
        self.site.max_pets = 0
        self.site.save()

        with self.assertRaises(BadRequest) as ctx:
            self.create(pets=1)
        self.assertEqual(ctx.exception.code, "PETS_NOT_ALLOWED")

    def test_minimum_stay(self) -> None:
        self.site.min_nights = 3
        self.site.save()

        with self.assertRaises(BadRequest) as ctx:
            self.create(nights=2)
        self.assertEqual(ctx.exception.code, "STAY_TOO_SHORT")

    def test_inactive_site(self) -> None:
        self.site.is_active = False
        self.site.save()

        with self.assertRaises(BadRequest) as ctx:
            self.create()
        self.assertEqual(ctx.exception.code, "SITE_INACTIVE")

    def test_past_check_in(self) -> None:
        with self.assertRaises(BadRequest) as ctx:
            self.create(check_in=timezone.localdate() - timedelta(days=1))
        self.assertEqual(ctx.exception.code, "CHECK_IN_IN_PAST")

    def test_host_cannot_book_own_site(self) -> None:
        with self.assertRaises(BadRequest):
            self.create(guest_id=self.host.pk)

    def test_tariff_change_does_not_touch_existing_booking(self) -> None:
        booking = self.create(nights=2)
        self.site.base_price = 999_000
        self.site.save()

        booking.refresh_from_db()
        self.assertEqual(booking.base_price, 300_000)
        self.assertEqual(booking.subtotal, 600_000)


class ConfirmBookingTests(LifecycleTestCase):
    @override_settings(BOOKING_SERVICE_FEE_BPS=1000, BOOKING_TAX_BPS=800)
    def test_host_confirms_and_pricing_is_finalized(self) -> None:
        booking = self.create(nights=2)
        self.assertEqual(booking.total, 650_000)

        booking = ConfirmBookingHandler().handle(
            ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk, host_message="See you there")
        )

        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.host_message, "See you there")
        self.assertEqual(booking.service_fee, 60_000)
        self.assertEqual(booking.tax, 56_800)
        self.assertEqual(booking.total, 766_800)

    def test_guest_cannot_confirm(self) -> None:
        booking = self.create()
        with self.assertRaises(Forbidden):
            ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))

    def test_cannot_confirm_twice(self) -> None:
        booking = self.create()
        handler = ConfirmBookingHandler()
        handler.handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

        with self.assertRaises(BadRequest) as ctx:
            handler.handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        self.assertEqual(ctx.exception.code, "INVALID_STATUS_TRANSITION")

    def test_unknown_booking(self) -> None:
        with self.assertRaises(NotFound):
            ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=424242, actor_id=self.host.pk))


class CancelBookingTests(LifecycleTestCase):
    def test_guest_cancellation_releases_nights(self) -> None:
        booking = self.create(nights=3)

        booking = CancelBookingHandler().handle(
            CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk, reason="Plans changed")
        )

        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.GUEST)
        self.assertEqual(booking.cancelled_by_id, self.guest.pk)
        self.assertEqual(booking.cancellation_reason, "Plans changed")
        self.assertIsNotNone(booking.cancelled_at)
        self.assertEqual(booking.refund_amount, 0)
        self.assertEqual(self.booked_dates(), [])
        self.assertCalendarMatchesBookings()

    def test_cancellation_keeps_host_blocks(self) -> None:
        booking = self.create(check_in=future(10), nights=2)
        SiteAvailability.objects.create(
            site=self.site,
            date=future(12),
            block_type=SiteAvailability.BlockType.BLOCKED,
        )

        CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

        self.assertTrue(SiteAvailability.objects.filter(site=self.site, date=future(12)).exists())
        self.assertCalendarMatchesBookings()

    def test_released_nights_can_be_booked_again(self) -> None:
        booking = self.create(check_in=future(10), nights=2)
        CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))

        again = self.create(check_in=future(10), nights=2)

        self.assertEqual(again.status, Booking.Status.PENDING)
        self.assertCalendarMatchesBookings()

    def test_refunds_follow_policy_for_paid_bookings(self) -> None:
        booking = self.create(check_in=future(5), nights=2)
        Booking.objects.filter(pk=booking.pk).update(payment_status=Booking.PaymentStatus.PAID)

        booking = CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))

        # Moderate policy, five days out: half refund
        self.assertEqual(booking.refund_amount, booking.total // 2)

    def test_host_cancellation_refunds_in_full(self) -> None:
        booking = self.create(check_in=future(1), nights=2)
        Booking.objects.filter(pk=booking.pk).update(payment_status=Booking.PaymentStatus.PAID)

        booking = CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.HOST)
        self.assertEqual(booking.refund_amount, booking.total)

    def test_system_cancellation(self) -> None:
        booking = self.create()
        booking = CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=None))

        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.SYSTEM)
        self.assertIsNone(booking.cancelled_by_id)

    def test_stranger_cannot_cancel(self) -> None:
        booking = self.create()
        stranger = make_user()

        with self.assertRaises(Forbidden):
            CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=stranger.pk))
        self.assertCalendarMatchesBookings()

    def test_cannot_cancel_twice(self) -> None:
        booking = self.create()
        handler = CancelBookingHandler()
        handler.handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))

        with self.assertRaises(BadRequest):
            handler.handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))


class RefundBookingTests(LifecycleTestCase):
    def paid(self, confirm: bool = True) -> Booking:
        booking = self.create()
        if confirm:
            ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        Booking.objects.filter(pk=booking.pk).update(payment_status=Booking.PaymentStatus.PAID)
        return Booking.objects.get(pk=booking.pk)

    def test_full_refund_cancels_confirmed_booking(self) -> None:
        booking = self.paid()

        booking = RefundBookingHandler().handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.HOST)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.REFUNDED)
        self.assertEqual(booking.refund_amount, booking.total)
        self.assertIsNotNone(booking.refunded_at)
        self.assertEqual(self.booked_dates(), [])
        self.assertCalendarMatchesBookings()

    def test_partial_refund_of_cancelled_booking(self) -> None:
        booking = self.paid()
        CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))

        booking = RefundBookingHandler().handle(
            RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk, amount=100_000)
        )

        self.assertEqual(booking.cancellation_source, Booking.CancellationSource.GUEST)
        self.assertEqual(booking.refund_amount, 100_000)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.REFUNDED)

    def test_unpaid_booking_cannot_be_refunded(self) -> None:
        booking = self.create()

        with self.assertRaises(BadRequest) as ctx:
            RefundBookingHandler().handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        self.assertEqual(ctx.exception.code, "BOOKING_NOT_PAID")

    def test_pending_paid_booking_is_not_refundable(self) -> None:
        booking = self.paid(confirm=False)

        with self.assertRaises(BadRequest) as ctx:
            RefundBookingHandler().handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        self.assertEqual(ctx.exception.code, "BOOKING_NOT_REFUNDABLE")

    def test_only_host_can_refund(self) -> None:
        booking = self.paid()

        with self.assertRaises(Forbidden):
            RefundBookingHandler().handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk))
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PAID)

    def test_amount_cannot_exceed_total(self) -> None:
        booking = self.paid()

        with self.assertRaises(BadRequest) as ctx:
            RefundBookingHandler().handle(
                RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk, amount=booking.total + 1)
            )
        self.assertEqual(ctx.exception.code, "INVALID_REFUND_AMOUNT")
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertCalendarMatchesBookings()

    def test_cannot_refund_twice(self) -> None:
        booking = self.paid()
        handler = RefundBookingHandler()
        handler.handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

        with self.assertRaises(BadRequest) as ctx:
            handler.handle(RefundBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        self.assertEqual(ctx.exception.code, "BOOKING_NOT_PAID")


class CompleteBookingTests(LifecycleTestCase):
    def confirmed(self, **kwargs) -> Booking:
        booking = self.create(**kwargs)
        return ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))

    def test_completes_after_checkout_and_releases_nights(self) -> None:
        booking = self.confirmed(nights=2)

        booking = CompleteBookingHandler().handle(
            CompleteBookingCommand(booking_id=booking.pk, actor_id=self.host.pk, today=booking.check_out)
        )

        self.assertEqual(booking.status, Booking.Status.COMPLETED)
        self.assertIsNotNone(booking.completed_at)
        self.assertEqual(self.booked_dates(), [])
        self.assertCalendarMatchesBookings()

    def test_cannot_complete_before_checkout(self) -> None:
        booking = self.confirmed(nights=2)

        with self.assertRaises(BadRequest) as ctx:
            CompleteBookingHandler().handle(
                CompleteBookingCommand(booking_id=booking.pk, today=booking.check_out - timedelta(days=1))
            )
        self.assertEqual(ctx.exception.code, "CHECKOUT_NOT_REACHED")

    def test_pending_booking_cannot_complete(self) -> None:
        booking = self.create(nights=2)

        with self.assertRaises(BadRequest) as ctx:
            CompleteBookingHandler().handle(CompleteBookingCommand(booking_id=booking.pk, today=booking.check_out))
        self.assertEqual(ctx.exception.code, "INVALID_STATUS_TRANSITION")

    def test_guest_cannot_complete(self) -> None:
        booking = self.confirmed(nights=2)

        with self.assertRaises(Forbidden):
            CompleteBookingHandler().handle(
                CompleteBookingCommand(booking_id=booking.pk, actor_id=self.guest.pk, today=booking.check_out)
            )


class MarkReviewedTests(LifecycleTestCase):
    def completed(self) -> Booking:
        booking = self.create(nights=1)
        ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk, actor_id=self.host.pk))
        return CompleteBookingHandler().handle(CompleteBookingCommand(booking_id=booking.pk, today=booking.check_out))

    def test_marks_once(self) -> None:
        booking = self.completed()
        handler = MarkReviewedHandler()

        booking = handler.handle(MarkReviewedCommand(booking_id=booking.pk, review_id=7))
        self.assertTrue(booking.reviewed)
        self.assertEqual(booking.review_id, 7)

        with self.assertRaises(Conflict):
            handler.handle(MarkReviewedCommand(booking_id=booking.pk, review_id=8))

    def test_requires_completed_booking(self) -> None:
        booking = self.create()

        with self.assertRaises(BadRequest) as ctx:
            MarkReviewedHandler().handle(MarkReviewedCommand(booking_id=booking.pk, review_id=1))
        self.assertEqual(ctx.exception.code, "BOOKING_NOT_COMPLETED")

"""Tests for the calendar store."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase

from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.tests.helpers import future, make_site, make_user
from apps.properties.models import SiteAvailability
from apps.properties.services import calendar_store
from shared.domain.exceptions import BadRequest, Conflict


class CalendarStoreTests(TestCase):
    def setUp(self) -> None:
        self.site = make_site()

    def test_claim_is_half_open(self) -> None:
        claimed = calendar_store.claim_range(self.site, future(5), future(8), reason="Booking CG1")

        self.assertEqual(claimed, 3)
        self.assertEqual(
            list(SiteAvailability.objects.filter(site=self.site).values_list("date", flat=True)),
            [future(5), future(6), future(7)],
        )
        self.assertTrue(calendar_store.is_range_free(self.site, future(8), future(10)))
        self.assertFalse(calendar_store.is_range_free(self.site, future(7), future(9)))

    def test_claim_reuses_available_rows(self) -> None:
        SiteAvailability.objects.create(
            site=self.site,
            date=future(5),
            is_available=True,
            block_type=SiteAvailability.BlockType.BLOCKED,
        )

        calendar_store.claim_range(self.site, future(5), future(6))

        record = SiteAvailability.objects.get(site=self.site, date=future(5))
        self.assertFalse(record.is_available)
        self.assertEqual(record.block_type, SiteAvailability.BlockType.BOOKED)

    def test_release_only_touches_the_given_block_type(self) -> None:
        calendar_store.claim_range(self.site, future(5), future(7))
        calendar_store.claim_range(self.site, future(7), future(8), block_type=SiteAvailability.BlockType.BLOCKED)

        released = calendar_store.release_range(self.site, future(5), future(8))

        self.assertEqual(released, 2)
        self.assertEqual(
            list(SiteAvailability.objects.filter(site=self.site).values_list("block_type", flat=True)),
            [SiteAvailability.BlockType.BLOCKED],
        )

    def test_invalid_range(self) -> None:
        with self.assertRaises(BadRequest):
            calendar_store.claim_range(self.site, future(5), future(5))

    def test_host_block_cannot_cover_a_booking(self) -> None:
        guest = make_user()
        CreateBookingHandler().handle(
            CreateBookingCommand(site_id=self.site.pk, guest_id=guest.pk, check_in=future(5), check_out=future(7))
        )

        with self.assertRaises(Conflict):
            calendar_store.block_dates(self.site, future(6), future(9), reason="Maintenance")

    def test_booked_type_is_not_a_host_block(self) -> None:
        with self.assertRaises(BadRequest) as ctx:
            calendar_store.block_dates(self.site, future(1), future(2), block_type=SiteAvailability.BlockType.BOOKED)
        self.assertEqual(ctx.exception.code, "INVALID_BLOCK_TYPE")

    def test_unblock_keeps_booked_nights(self) -> None:
        calendar_store.claim_range(self.site, future(5), future(6))
        calendar_store.block_dates(self.site, future(6), future(8), block_type=SiteAvailability.BlockType.MAINTENANCE)

        removed = calendar_store.unblock_dates(self.site, future(5), future(8))

        self.assertEqual(removed, 2)
        self.assertEqual(SiteAvailability.objects.get(site=self.site).date, future(5))

    def test_blocked_dates_and_unavailable_sites(self) -> None:
        other = make_site(host=self.site.property.host)
        calendar_store.block_dates(self.site, future(3), future(5))

        self.assertEqual(calendar_store.blocked_dates(self.site, future(0), future(10)), [future(3), future(4)])
        self.assertEqual(calendar_store.unavailable_site_ids(future(4), future(6)), {self.site.pk})
        self.assertEqual(calendar_store.unavailable_site_ids(future(4), future(6), [other.pk]), set())
        self.assertEqual(calendar_store.unavailable_site_ids(future(5), future(6)), set())

"""Calendar store for site availability.

Every read and write of ``SiteAvailability`` goes through ``CalendarStore``.
Ranges are half-open: ``check_out`` is never part of the claimed nights.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from django.db import IntegrityError, transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import BadRequest, Conflict
from shared.domain.value_objects import DateRange

from .models import Site, SiteAvailability

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _as_range(check_in: date, check_out: date) -> DateRange:
    try:
        return DateRange(check_in, check_out)
    except ValueError:
        raise BadRequest(
            "Check-out date must be after check-in date.",
            code="INVALID_DATE_RANGE",
        )


class CalendarStore:
    """Owns per-site, per-date availability records."""

    def unavailable_dates(self, site: Site | int, check_in: date, check_out: date) -> list[date]:
        return list(
            SiteAvailability.objects.filter(
                site=site,
                is_available=False,
                date__gte=check_in,
                date__lt=check_out,
            )
            .order_by("date")
            .values_list("date", flat=True)
        )

    def is_range_free(self, site: Site | int, check_in: date, check_out: date) -> bool:
        _as_range(check_in, check_out)
        return not SiteAvailability.objects.filter(
            site=site,
            is_available=False,
            date__gte=check_in,
            date__lt=check_out,
        ).exists()

    def claim_range(
        self,
        site: Site,
        check_in: date,
        check_out: date,
        reason: str = "",
        block_type: str = SiteAvailability.BlockType.BOOKED,
    ) -> int:
        """Mark every night of the range unavailable.

        Rejects with ``Conflict`` if any night is already unavailable, so two
        racing claims cannot both succeed. The ``(site, date)`` unique
        constraint catches the insert race the row lock cannot see.
        Returns the number of nights claimed.
        """
        dates = _as_range(check_in, check_out)

        try:
            with transaction.atomic():
                existing = {
                    record.date: record
                    for record in _lock_queryset_if_possible(
                        SiteAvailability.objects.filter(
                            site=site,
                            date__gte=check_in,
                            date__lt=check_out,
                        )
                    )
                }
                taken = sorted(day for day, record in existing.items() if not record.is_available)
                if taken:
                    raise Conflict(
                        "Selected dates are no longer available.",
                        code="DATES_UNAVAILABLE",
                        details={"dates": [day.isoformat() for day in taken]},
                    )

                to_create = []
                for day in dates.days():
                    record = existing.get(day)
                    if record is None:
                        to_create.append(
                            SiteAvailability(
                                site=site,
                                date=day,
                                is_available=False,
                                block_type=block_type,
                                reason=reason,
                            )
                        )
                        continue
                    record.is_available = False
                    record.block_type = block_type
                    record.reason = reason
                    record.save(update_fields=["is_available", "block_type", "reason", "updated_at"])

                SiteAvailability.objects.bulk_create(to_create)
        except IntegrityError:
            logger.warning(f"Concurrent claim on site {site.pk} for {dates}")
            raise Conflict(
                "Selected dates are no longer available.",
                code="DATES_UNAVAILABLE",
            )

        logger.info(f"Claimed {len(dates)} night(s) on site {site.pk} for {dates} ({block_type})")
        return len(dates)

    def release_range(
        self,
        site: Site | int,
        check_in: date,
        check_out: date,
        block_type: str = SiteAvailability.BlockType.BOOKED,
    ) -> int:
        """Delete the range's records of ``block_type`` only.

        Host blocks inside the range survive a released booking.
        """
        _as_range(check_in, check_out)
        deleted, _ = SiteAvailability.objects.filter(
            site=site,
            date__gte=check_in,
            date__lt=check_out,
            block_type=block_type,
        ).delete()
        logger.info(
            f"Released {deleted} {block_type} record(s) on site {getattr(site, 'pk', site)} "
            f"for {check_in} - {check_out}"
        )
        return deleted

    def block_dates(
        self,
        site: Site,
        check_in: date,
        check_out: date,
        block_type: str = SiteAvailability.BlockType.BLOCKED,
        reason: str = "",
    ) -> int:
        """Host-initiated block. Booked nights cannot be blocked over."""
        if block_type == SiteAvailability.BlockType.BOOKED:
            raise BadRequest("Hosts cannot create booked records directly.", code="INVALID_BLOCK_TYPE")

        from apps.bookings.services import ConflictDetector  # Local import to prevent circular dependency

        with transaction.atomic():
            Site.objects.select_for_update().filter(pk=site.pk).first()
            if ConflictDetector(self).has_booking_overlap(site, check_in, check_out):
                raise Conflict(
                    "Selected dates overlap an existing booking.",
                    code="DATES_UNAVAILABLE",
                )
            return self.claim_range(site, check_in, check_out, reason=reason, block_type=block_type)

    def unblock_dates(self, site: Site, check_in: date, check_out: date) -> int:
        """Remove host blocks and maintenance records, never booked ones."""
        deleted = 0
        for block_type in (SiteAvailability.BlockType.BLOCKED, SiteAvailability.BlockType.MAINTENANCE):
            deleted += self.release_range(site, check_in, check_out, block_type=block_type)
        return deleted

    def blocked_dates(self, site: Site | int, start: date, end: date) -> list[date]:
        """Nights in ``[start, end)`` that cannot be booked, for calendar display."""
        from apps.bookings.services import live_bookings  # Local import to prevent circular dependency

        dates = set(self.unavailable_dates(site, start, end))
        window = _as_range(start, end)
        for check_in, check_out in live_bookings(site, start, end).values_list("check_in", "check_out"):
            for day in DateRange(check_in, check_out).days():
                if window.contains(day):
                    dates.add(day)
        return sorted(dates)

    def unavailable_site_ids(self, check_in: date, check_out: date, site_ids: Iterable[int] | None = None) -> set[int]:
        """Sites that cannot take the whole range, for the search layer."""
        from apps.bookings.services import live_bookings  # Local import to prevent circular dependency

        _as_range(check_in, check_out)
        records = SiteAvailability.objects.filter(
            is_available=False,
            date__gte=check_in,
            date__lt=check_out,
        )
        bookings = live_bookings(None, check_in, check_out)
        if site_ids is not None:
            site_ids = list(site_ids)
            records = records.filter(site_id__in=site_ids)
            bookings = bookings.filter(site_id__in=site_ids)

        blocked = set(records.values_list("site_id", flat=True))
        booked = set(bookings.values_list("site_id", flat=True))
        return blocked | booked


calendar_store = CalendarStore()

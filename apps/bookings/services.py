"""Conflict detection for booking workflows."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from django.db.models import Q  # type: ignore

from apps.properties.services import CalendarStore, calendar_store
from .domain.entities import LIVE_STATUSES

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.properties.models import Site


def live_bookings(site, check_in: date, check_out: date, *, exclude_booking_id=None):
    """Pending or confirmed bookings overlapping ``[check_in, check_out)``.

    ``site`` may be ``None`` to search across all sites.
    """

    from .models import Booking  # Local import to prevent circular dependency

    overlapping_filter = Q(check_in__lt=check_out) & Q(check_out__gt=check_in)

    qs = Booking.objects.filter(
        status__in=[status.value for status in LIVE_STATUSES],
    ).filter(overlapping_filter)

    if site is not None:
        qs = qs.filter(site=site)
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs


class ConflictDetector:
    """Decides whether a site can take a new stay.

    The calendar records are the primary check. The overlap query against
    live bookings catches any claim that skipped the calendar store. Both
    always run.
    """

    def __init__(self, calendar: CalendarStore | None = None):
        self.calendar = calendar or calendar_store

    def has_booking_overlap(
        self,
        site: "Site",
        check_in: date,
        check_out: date,
        *,
        exclude_booking_id=None,
    ) -> bool:
        return live_bookings(site, check_in, check_out, exclude_booking_id=exclude_booking_id).exists()

    def has_conflict(
        self,
        site: "Site",
        check_in: date,
        check_out: date,
        *,
        exclude_booking_id=None,
    ) -> bool:
        calendar_busy = not self.calendar.is_range_free(site, check_in, check_out)
        booking_overlap = self.has_booking_overlap(
            site,
            check_in,
            check_out,
            exclude_booking_id=exclude_booking_id,
        )
        return calendar_busy or booking_overlap


"""
Booking Command Handlers

These are the use cases of the booking lifecycle. Each handler runs in a
``DjangoUnitOfWork``: one transaction, with domain events published after
commit.

Commands:
- CreateBookingCommand: Price, persist and claim nights for a new stay
- ConfirmBookingCommand: Host accepts a pending booking
- CancelBookingCommand: Guest, host or expiry job cancels a live booking
- CompleteBookingCommand: Close a confirmed booking after checkout
- MarkReviewedCommand: Link a review to a completed booking
- RefundBookingCommand: Host returns money on a paid booking
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import BadRequest, Conflict, Forbidden, NotFound
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import (
    PriceBreakdown,
    calculate_pricing,
    count_nights,
    finalize_pricing,
    refund_amount,
)
from apps.bookings.models import Booking
from apps.bookings.services import ConflictDetector
from apps.properties.models import Site
from apps.properties.services import CalendarStore, calendar_store

logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 5


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    site_id: int
    guest_id: int
    check_in: date
    check_out: date
    guests: int = 1
    pets: int = 0
    vehicles: int = 0
    guest_message: str = ''


@dataclass
class ConfirmBookingCommand:
    """Host accepts a pending booking"""
    booking_id: int
    actor_id: int
    host_message: str = ''


@dataclass
class CancelBookingCommand:
    """
    Cancel a live booking

    ``actor_id`` is None only for system cancellations (expiry job).
    """
    booking_id: int
    actor_id: Optional[int]
    reason: str = ''


@dataclass
class CompleteBookingCommand:
    booking_id: int
    actor_id: Optional[int] = None
    today: Optional[date] = None


@dataclass
class MarkReviewedCommand:
    booking_id: int
    review_id: int


@dataclass
class RefundBookingCommand:
    """
    Host refund of a paid booking

    ``amount`` defaults to the full total. A confirmed booking is cancelled
    by the host as part of the refund.
    """
    booking_id: int
    actor_id: int
    amount: Optional[int] = None
    reason: str = ''


# ===== Helpers =====

def _load_for_update(booking_id: int) -> Booking:
    try:
        return Booking.objects.select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFound(f"Booking {booking_id} not found.", code="BOOKING_NOT_FOUND")


def _release_booked_nights(calendar: CalendarStore, booking: Booking) -> int:
    return calendar.release_range(
        booking.site_id,
        booking.check_in,
        booking.check_out,
        block_type="booked",
    )


def _finalized(booking: Booking) -> PriceBreakdown:
    breakdown = PriceBreakdown(
        nights=booking.nights,
        base_price=booking.base_price,
        weekend_price=booking.weekend_price,
        weekday_nights=booking.weekday_nights,
        weekend_nights=booking.weekend_nights,
        subtotal=booking.subtotal,
        cleaning_fee=booking.cleaning_fee,
        pet_fee=booking.pet_fee,
        extra_guest_fee=booking.extra_guest_fee,
    )
    return finalize_pricing(
        breakdown,
        service_fee_bps=settings.BOOKING_SERVICE_FEE_BPS,
        tax_bps=settings.BOOKING_TAX_BPS,
    )


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking is closed twice:
    1. The site row is locked (SELECT FOR UPDATE) around check and claim,
       so concurrent requests for one site run one after another.
    2. ``CalendarStore.claim_range`` rejects already-claimed nights and the
       (site, date) unique constraint rejects a concurrent insert.
    """

    def __init__(self, calendar: Optional[CalendarStore] = None, conflicts: Optional[ConflictDetector] = None):
        self.calendar = calendar or calendar_store
        self.conflicts = conflicts or ConflictDetector(self.calendar)

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for site {command.site_id}, guest {command.guest_id}, "
            f"dates {command.check_in} - {command.check_out}"
        )

        nights = count_nights(command.check_in, command.check_out)
        if command.check_in < timezone.localdate():
            raise BadRequest("Check-in date cannot be in the past.", code="CHECK_IN_IN_PAST")

        with DjangoUnitOfWork() as uow:
            site = self._lock_site(command.site_id)
            self._validate(site, command, nights)

            if self.conflicts.has_conflict(site, command.check_in, command.check_out):
                raise Conflict(
                    "The site is not available for the selected dates.",
                    code="DATES_UNAVAILABLE",
                )

            pricing = calculate_pricing(
                base_price=site.base_price,
                nights=nights,
                guests=command.guests,
                max_guests=site.max_guests,
                pets=command.pets,
                pet_fee=site.pet_fee,
                extra_guest_fee=site.extra_guest_fee,
                cleaning_fee=site.cleaning_fee,
                weekend_price=site.weekend_price,
                check_in=command.check_in,
            )

            booking = Booking(
                site=site,
                property=site.property,
                guest_id=command.guest_id,
                host_id=site.property.host_id,
                check_in=command.check_in,
                check_out=command.check_out,
                guests=command.guests,
                pets=command.pets,
                vehicles=command.vehicles,
                guest_message=command.guest_message,
                currency=settings.DEFAULT_CURRENCY,
            )
            booking.apply_pricing(pricing)
            self._insert(booking)

            self.calendar.claim_range(
                site,
                command.check_in,
                command.check_out,
                reason=f"Booking {booking.code}",
            )

            if site.instant_book:
                booking.confirm(pricing=_finalized(booking), instant=True)
                booking.save()

            # BookingCreated leads, carrying the status and total after instant confirmation
            later_events = booking.events
            booking.clear_events()
            booking.add_event(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                site_id=site.pk,
                guest_id=booking.guest_id,
                host_id=booking.host_id,
                check_in=booking.check_in,
                check_out=booking.check_out,
                total=booking.total,
                status=booking.status,
            ))
            for event in later_events:
                booking.add_event(event)

            uow.collect_events(booking)

        logger.info(f"Booking created successfully: {booking.code} ({booking.status})")
        return booking

    def _lock_site(self, site_id: int) -> Site:
        try:
            return (
                Site.objects.select_for_update(of=("self",))
                .select_related("property")
                .get(pk=site_id)
            )
        except Site.DoesNotExist:
            raise NotFound(f"Site {site_id} not found.", code="SITE_NOT_FOUND")

    def _validate(self, site: Site, command: CreateBookingCommand, nights: int) -> None:
        if not site.is_bookable:
            raise BadRequest("This site is not accepting bookings.", code="SITE_INACTIVE")
        if site.property.host_id == command.guest_id:
            raise BadRequest("Hosts cannot book their own sites.", code="HOST_SELF_BOOKING")

        if command.guests < 1:
            raise BadRequest("At least one guest is required.", code="INVALID_GUEST_COUNT")
        if command.guests > site.max_guests:
            raise BadRequest(
                f"This site accepts at most {site.max_guests} guest(s).",
                code="GUEST_LIMIT_EXCEEDED",
            )
        if command.pets > 0 and not site.allows_pets:
            raise BadRequest("Pets are not allowed at this site.", code="PETS_NOT_ALLOWED")
        if command.pets > site.max_pets:
            raise BadRequest(
                f"This site accepts at most {site.max_pets} pet(s).",
                code="PET_LIMIT_EXCEEDED",
            )
        if command.vehicles > site.max_vehicles:
            raise BadRequest(
                f"This site accepts at most {site.max_vehicles} vehicle(s).",
                code="VEHICLE_LIMIT_EXCEEDED",
            )

        if nights < site.min_nights:
            raise BadRequest(
                f"Minimum stay is {site.min_nights} night(s).",
                code="STAY_TOO_SHORT",
            )
        if site.max_nights is not None and nights > site.max_nights:
            raise BadRequest(
                f"Maximum stay is {site.max_nights} night(s).",
                code="STAY_TOO_LONG",
            )

    def _insert(self, booking: Booking) -> None:
        """Save with a fresh code, retrying the rare random collision"""
        for attempt in range(CODE_ATTEMPTS):
            booking.code = Booking.generate_code()
            booking.payment_order_code = Booking.generate_order_code()
            try:
                with transaction.atomic():
                    booking.save()
                return
            except IntegrityError:
                logger.warning(f"Booking code collision on attempt {attempt + 1}, retrying")
        raise Conflict("Could not allocate a booking code, please retry.", code="BOOKING_CODE_EXHAUSTED")


class ConfirmBookingHandler:
    """Handler for host confirmation (PENDING -> CONFIRMED)"""

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        logger.info(f"Confirming booking {command.booking_id} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            if booking.host_id != command.actor_id:
                raise Forbidden("Only the host can confirm this booking.", code="NOT_BOOKING_HOST")

            booking.confirm(host_message=command.host_message, pricing=_finalized(booking))
            booking.save()
            uow.collect_events(booking)

        logger.info(f"Booking {booking.code} confirmed, total {booking.total}")
        return booking


class CancelBookingHandler:
    """Handler for cancellation; the status write and calendar release share one transaction"""

    def __init__(self, calendar: Optional[CalendarStore] = None):
        self.calendar = calendar or calendar_store

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason!r}")

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            source = self._source(booking, command.actor_id)

            refund = self._calculate_refund(booking, source)
            booking.cancel(
                source=source,
                cancelled_by_id=command.actor_id,
                reason=command.reason,
                refund=refund,
            )
            booking.save()
            released = _release_booked_nights(self.calendar, booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.code} cancelled by {source}, released {released} night(s)")
        return booking

    @staticmethod
    def _source(booking: Booking, actor_id: Optional[int]) -> str:
        if actor_id is None:
            return Booking.CancellationSource.SYSTEM
        if actor_id == booking.guest_id:
            return Booking.CancellationSource.GUEST
        if actor_id == booking.host_id:
            return Booking.CancellationSource.HOST
        raise Forbidden("Only the guest or the host can cancel this booking.", code="NOT_BOOKING_PARTY")

    @staticmethod
    def _calculate_refund(booking: Booking, source: str) -> int:
        """
        Refund owed to the guest

        Nothing is owed before payment. Host and system cancellations refund
        in full; guest cancellations follow the property's policy.
        """
        if booking.payment_status != Booking.PaymentStatus.PAID:
            return 0
        if source != Booking.CancellationSource.GUEST:
            return booking.total
        days_before = (booking.check_in - timezone.localdate()).days
        return refund_amount(booking.total, booking.property.cancellation_policy, days_before)


class CompleteBookingHandler:
    """Handler for completion (CONFIRMED -> COMPLETED) after checkout"""

    def __init__(self, calendar: Optional[CalendarStore] = None):
        self.calendar = calendar or calendar_store

    def handle(self, command: CompleteBookingCommand) -> Booking:
        logger.info(f"Completing booking {command.booking_id}")
        today = command.today or timezone.localdate()

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            if command.actor_id is not None and command.actor_id != booking.host_id:
                raise Forbidden("Only the host can complete this booking.", code="NOT_BOOKING_HOST")

            if today < booking.check_out:
                raise BadRequest(
                    "A booking can only be completed on or after its check-out date.",
                    code="CHECKOUT_NOT_REACHED",
                )
            booking.complete()
            booking.save()
            _release_booked_nights(self.calendar, booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.code} completed")
        return booking


class MarkReviewedHandler:
    """Link a review to its booking; allowed once, and only after completion"""

    def handle(self, command: MarkReviewedCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            if booking.status != Booking.Status.COMPLETED:
                raise BadRequest("Only completed stays can be reviewed.", code="BOOKING_NOT_COMPLETED")
            if booking.reviewed:
                raise Conflict("This booking has already been reviewed.", code="ALREADY_REVIEWED")

            booking.mark_reviewed(command.review_id)
            booking.save(update_fields=["reviewed", "review_id", "updated_at"])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.code} linked to review {command.review_id}")
        return booking


class RefundBookingHandler:
    """Handler for host refunds; cancellation, release and refund share one transaction"""

    REFUNDABLE = (Booking.Status.CONFIRMED, Booking.Status.CANCELLED)

    def __init__(self, calendar: Optional[CalendarStore] = None):
        self.calendar = calendar or calendar_store

    def handle(self, command: RefundBookingCommand) -> Booking:
        logger.info(f"Refunding booking {command.booking_id} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            if booking.host_id != command.actor_id:
                raise Forbidden("Only the host can refund this booking.", code="NOT_BOOKING_HOST")
            if booking.payment_status != Booking.PaymentStatus.PAID:
                raise BadRequest("Only paid bookings can be refunded.", code="BOOKING_NOT_PAID")
            if booking.status not in self.REFUNDABLE:
                raise BadRequest(
                    f"A {booking.status} booking cannot be refunded.",
                    code="BOOKING_NOT_REFUNDABLE",
                )

            amount = booking.total if command.amount is None else command.amount
            if not 1 <= amount <= booking.total:
                raise BadRequest(
                    f"Refund must be between 1 and {booking.total}.",
                    code="INVALID_REFUND_AMOUNT",
                )

            if booking.status == Booking.Status.CONFIRMED:
                booking.cancel(
                    source=Booking.CancellationSource.HOST,
                    cancelled_by_id=command.actor_id,
                    reason=command.reason,
                    refund=amount,
                )
                booking.save()
                _release_booked_nights(self.calendar, booking)

            booking.refund(amount)
            booking.save()
            uow.collect_events(booking)

        logger.info(f"Booking {booking.code} refunded {amount}")
        return booking

"""
Pricing engine

Pure functions over integer money in the smallest currency unit. The
breakdown computed at creation time carries zero service fee and tax;
``finalize_pricing`` adds them when the booking is confirmed.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Optional

from shared.domain.base import ValueObject
from shared.domain.exceptions import BadRequest
from shared.domain.value_objects import Money

# date.weekday() values of Friday and Saturday
WEEKEND_NIGHTS = (4, 5)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    nights: int
    base_price: int
    weekend_price: Optional[int]
    weekday_nights: int
    weekend_nights: int
    subtotal: int
    cleaning_fee: int
    pet_fee: int
    extra_guest_fee: int
    service_fee: int = 0
    tax: int = 0

    @property
    def total(self) -> int:
        return (
            self.subtotal
            + self.cleaning_fee
            + self.pet_fee
            + self.extra_guest_fee
            + self.service_fee
            + self.tax
        )

    def as_snapshot(self) -> dict:
        return {
            'nights': self.nights,
            'base_price': self.base_price,
            'weekend_price': self.weekend_price,
            'weekday_nights': self.weekday_nights,
            'weekend_nights': self.weekend_nights,
            'subtotal': self.subtotal,
            'cleaning_fee': self.cleaning_fee,
            'pet_fee': self.pet_fee,
            'extra_guest_fee': self.extra_guest_fee,
            'service_fee': self.service_fee,
            'tax': self.tax,
            'total': self.total,
        }


def count_nights(check_in, check_out) -> int:
    """
    Whole nights between two dates (or datetimes), rounded up.

    Rejects ``check_out <= check_in`` before any arithmetic, so the result
    is always at least one.
    """
    if check_out <= check_in:
        raise BadRequest(
            "Check-out date must be after check-in date.",
            code="INVALID_DATE_RANGE",
        )
    delta = check_out - check_in
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def _split_nights(check_in: date, nights: int) -> tuple:
    weekend = sum(
        1 for offset in range(nights)
        if (check_in + timedelta(days=offset)).weekday() in WEEKEND_NIGHTS
    )
    return nights - weekend, weekend


def calculate_pricing(
    base_price: int,
    nights: int,
    guests: int,
    max_guests: int,
    pets: int = 0,
    pet_fee: int = 0,
    extra_guest_fee: int = 0,
    cleaning_fee: int = 0,
    weekend_price: Optional[int] = None,
    check_in: Optional[date] = None,
) -> PriceBreakdown:
    """
    Price a stay.

    subtotal        = base_price * nights (Friday/Saturday nights at
                      weekend_price when both it and check_in are given)
    pet_fee         = pet_fee * pets
    extra_guest_fee = extra_guest_fee * max(0, guests - max_guests) * nights
    """
    if nights < 1:
        raise BadRequest("A stay must be at least one night.", code="INVALID_DATE_RANGE")
    if guests < 1:
        raise BadRequest("At least one guest is required.", code="INVALID_GUEST_COUNT")
    if pets < 0:
        raise BadRequest("Pet count cannot be negative.", code="INVALID_PET_COUNT")

    if weekend_price is not None and check_in is not None:
        weekday_nights, weekend_nights = _split_nights(check_in, nights)
        subtotal = base_price * weekday_nights + weekend_price * weekend_nights
    else:
        weekday_nights, weekend_nights = nights, 0
        subtotal = base_price * nights

    extra_guests = max(0, guests - max_guests)

    return PriceBreakdown(
        nights=nights,
        base_price=base_price,
        weekend_price=weekend_price,
        weekday_nights=weekday_nights,
        weekend_nights=weekend_nights,
        subtotal=subtotal,
        cleaning_fee=cleaning_fee,
        pet_fee=pet_fee * pets if pets else 0,
        extra_guest_fee=extra_guest_fee * extra_guests * nights,
    )


def finalize_pricing(breakdown: PriceBreakdown, service_fee_bps: int = 0, tax_bps: int = 0) -> PriceBreakdown:
    """
    Add service fee and tax, both in basis points.

    The service fee is charged on the subtotal; tax on everything else.
    """
    service_fee = Money(breakdown.subtotal).percent(service_fee_bps).amount
    taxable = replace(breakdown, service_fee=service_fee, tax=0).total
    tax = Money(taxable).percent(tax_bps).amount
    return replace(breakdown, service_fee=service_fee, tax=tax)


# Minimum days before check-in for a full and a half refund
REFUND_TIERS = {
    'flexible': (3, 1),
    'moderate': (7, 3),
    'strict': (14, 7),
}


def refund_percent(policy: str, days_before_check_in: int) -> int:
    full, half = REFUND_TIERS.get(policy, REFUND_TIERS['moderate'])
    if days_before_check_in >= full:
        return 100
    if days_before_check_in >= half:
        return 50
    return 0


def refund_amount(total: int, policy: str, days_before_check_in: int) -> int:
    return total * refund_percent(policy, days_before_check_in) // 100

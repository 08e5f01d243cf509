"""
Booking Domain Events

Published through the message bus after the transaction that produced
them commits.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A booking was created and its nights claimed

    Triggers:
    - Request a checkout link from the payment provider
    """
    booking_id: int
    site_id: int
    guest_id: int
    host_id: int
    check_in: date
    check_out: date
    total: int
    status: str


@dataclass
class BookingConfirmed(DomainEvent):
    """Event: PENDING -> CONFIRMED, by the host or instant book"""
    booking_id: int
    site_id: int
    host_id: int
    instant: bool = False


@dataclass
class BookingCancelled(DomainEvent):
    """Event: Booking cancelled and its nights released"""
    booking_id: int
    site_id: int
    source: str
    cancelled_by_id: Optional[int]
    refund_amount: int
    old_status: str


@dataclass
class BookingCompleted(DomainEvent):
    """Event: CONFIRMED -> COMPLETED, the guest may now review"""
    booking_id: int
    site_id: int
    guest_id: int


@dataclass
class BookingReviewed(DomainEvent):
    booking_id: int
    review_id: int


@dataclass
class BookingPaymentUpdated(DomainEvent):
    booking_id: int
    payment_status: str

"""
Booking lifecycle

State machine:
- PENDING -> CONFIRMED (host confirms, or instant book at creation)
- PENDING -> CANCELLED (guest, host or expiry job)
- CONFIRMED -> CANCELLED (guest or host)
- CONFIRMED -> COMPLETED (checkout date reached)

CANCELLED and COMPLETED are terminal. Payment outcome never moves a
booking between these states.
"""

from enum import Enum
from typing import Dict, FrozenSet

from shared.domain.exceptions import BadRequest


class BookingStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

# Statuses whose nights are held on the calendar
LIVE_STATUSES: FrozenSet[BookingStatus] = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def can_transition(current: str, target: str) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_transition(current: str, target: str) -> None:
    """Raise ``BadRequest`` unless ``current -> target`` is a legal move."""
    if not can_transition(current, target):
        raise BadRequest(
            f"Cannot move booking from {BookingStatus(current).value} to {BookingStatus(target).value}.",
            code="INVALID_STATUS_TRANSITION",
            details={"from": BookingStatus(current).value, "to": BookingStatus(target).value},
        )


def is_terminal(status: str) -> bool:
    return not TRANSITIONS[BookingStatus(status)]

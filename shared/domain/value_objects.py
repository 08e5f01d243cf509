"""
Common Value Objects

Value objects used across multiple domains:
- Money: Integer amount in the smallest currency unit
- DateRange: Half-open range of calendar dates (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject


SUPPORTED_CURRENCIES = ('VND', 'USD', 'EUR')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are integers in the smallest unit of the currency, so
    arithmetic never goes through floats.
    """
    amount: int
    currency: str = 'VND'

    def __post_init__(self):
        if not isinstance(self.amount, int):
            raise TypeError("Amount must be an integer number of minor units")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> 'Money':
        if not isinstance(factor, int):
            raise TypeError("Can only multiply Money by an integer")
        return Money(self.amount * factor, self.currency)

    def percent(self, basis_points: int) -> 'Money':
        """Share of the amount expressed in basis points, rounded half up."""
        return Money((self.amount * basis_points + 5000) // 10000, self.currency)

    def __str__(self):
        return f"{self.amount:,} {self.currency}"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    The guest vacates on end_date, so that date is never part of the stay.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Adjacent ranges (one ends the day the other starts) don't overlap.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Yield every night of the range."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

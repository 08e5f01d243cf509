"""Models for the review domain.

A ``Review`` is feedback a guest leaves for one completed booking. Ratings
are split into a property triad (location, communication, value) and a
site triad (cleanliness, accuracy, amenities) that feed the two rating
rollups independently.
"""

from __future__ import annotations

import builtins
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

RATING_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]

PROPERTY_RATING_FIELDS = ("location_rating", "communication_rating", "value_rating")
SITE_RATING_FIELDS = ("cleanliness_rating", "accuracy_rating", "amenities_rating")

ONE_DECIMAL = Decimal("0.1")


def round_rating(value) -> Decimal:
    """Half-up rounding to one decimal place."""
    return Decimal(str(value)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


class Review(models.Model):
    """Guest review of a completed stay."""

    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="review",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    site = models.ForeignKey(
        "properties.Site",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_reviews",
    )

    # Property triad
    location_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    communication_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    value_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)

    # Site triad
    cleanliness_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    accuracy_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)
    amenities_rating = models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)

    overall_rating = models.DecimalField(max_digits=2, decimal_places=1, editable=False)
    comment = models.TextField(blank=True)

    is_published = models.BooleanField(default=True)

    host_response = models.TextField(blank=True)
    host_response_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["site", "is_published"], name="review_site_published_idx"),
            models.Index(fields=["property", "is_published"], name="review_property_published_idx"),
        ]

    def __str__(self) -> str:
        return f"Review by {self.guest_id} for site {self.site_id} ({self.overall_rating})"

    @builtins.property
    def has_host_response(self) -> bool:
        return bool(self.host_response)

    def compute_overall_rating(self) -> Decimal:
        ratings = [getattr(self, name) for name in PROPERTY_RATING_FIELDS + SITE_RATING_FIELDS]
        return round_rating(Decimal(sum(ratings)) / len(ratings))

    def save(self, *args, **kwargs):  # type: ignore
        self.overall_rating = self.compute_overall_rating()
        super().save(*args, **kwargs)

"""Property domain models for CampGO.

A ``Property`` is a campground owned by a host. Guests book one of its
``Site`` rows (a pitch, cabin or glamping tent) for a range of nights.
``SiteAvailability`` holds one row per site per unavailable date; a date
without a row is open.
"""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """Campground listed on the marketplace."""

    class Status(models.TextChoices):
        DRAFT = "draft", _("Draft")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    class CancellationPolicy(models.TextChoices):
        FLEXIBLE = "flexible", _("Flexible (full refund 3+ days out)")
        MODERATE = "moderate", _("Moderate (full refund 7+ days out, half 3+)")
        STRICT = "strict", _("Strict (full refund 14+ days out, half 7+)")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    cancellation_policy = models.CharField(
        max_length=20,
        choices=CancellationPolicy.choices,
        default=CancellationPolicy.MODERATE,
    )

    rating_average = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_count = models.PositiveIntegerField(default=0)
    rating_location = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_communication = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_value = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["host", "status"], name="property_host_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.name)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class Site(models.Model):
    """Bookable unit inside a property.

    Capacity and tariff are plain value fields with explicit defaults; a
    site allows pets only when ``max_pets`` is above zero. Money is stored
    as integers in the smallest currency unit.
    """

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="sites",
    )
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    max_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    max_pets = models.PositiveSmallIntegerField(default=0)
    max_vehicles = models.PositiveSmallIntegerField(default=0)

    base_price = models.PositiveBigIntegerField()
    weekend_price = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text=_("Nightly price for Friday and Saturday nights."),
    )
    cleaning_fee = models.PositiveBigIntegerField(default=0)
    pet_fee = models.PositiveBigIntegerField(default=0, help_text=_("Charged once per pet."))
    extra_guest_fee = models.PositiveBigIntegerField(
        default=0,
        help_text=_("Charged per guest above capacity, per night."),
    )

    min_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    max_nights = models.PositiveSmallIntegerField(null=True, blank=True)
    instant_book = models.BooleanField(default=False)

    rating_average = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_count = models.PositiveIntegerField(default=0)
    rating_cleanliness = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_accuracy = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))
    rating_amenities = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal("0.0"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Site")
        verbose_name_plural = _("Sites")
        ordering = ["property_id", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_nights__isnull=True) | models.Q(max_nights__gte=models.F("min_nights")),
                name="site_valid_stay_limits",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.property.name}: {self.name}"

    @builtins.property
    def host_id(self) -> int:
        return self.property.host_id

    @builtins.property
    def allows_pets(self) -> bool:
        return self.max_pets > 0

    @builtins.property
    def is_bookable(self) -> bool:
        return self.is_active and self.property.is_active


class SiteAvailability(models.Model):
    """One unavailable calendar date of one site."""

    class BlockType(models.TextChoices):
        BOOKED = "booked", _("Booked")
        BLOCKED = "blocked", _("Blocked by host")
        MAINTENANCE = "maintenance", _("Maintenance")

    site = models.ForeignKey(
        Site,
        on_delete=models.CASCADE,
        related_name="availability",
    )
    date = models.DateField()
    is_available = models.BooleanField(default=False)
    block_type = models.CharField(max_length=20, choices=BlockType.choices)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Site availability")
        verbose_name_plural = _("Site availability")
        ordering = ["site_id", "date"]
        constraints = [
            models.UniqueConstraint(fields=["site", "date"], name="unique_site_availability_date"),
        ]
        indexes = [
            models.Index(fields=["date", "is_available"], name="availability_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.site_id} {self.date} ({self.block_type})"

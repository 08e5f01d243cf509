import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("active", "Active"), ("inactive", "Inactive")],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "cancellation_policy",
                    models.CharField(
                        choices=[
                            ("flexible", "Flexible (full refund 3+ days out)"),
                            ("moderate", "Moderate (full refund 7+ days out, half 3+)"),
                            ("strict", "Strict (full refund 14+ days out, half 7+)"),
                        ],
                        default="moderate",
                        max_length=20,
                    ),
                ),
                ("rating_average", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_count", models.PositiveIntegerField(default=0)),
                ("rating_location", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_communication", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_value", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "host",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="properties",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Property",
                "verbose_name_plural": "Properties",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["host", "status"], name="property_host_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Site",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "max_guests",
                    models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("max_pets", models.PositiveSmallIntegerField(default=0)),
                ("max_vehicles", models.PositiveSmallIntegerField(default=0)),
                ("base_price", models.PositiveBigIntegerField()),
                (
                    "weekend_price",
                    models.PositiveBigIntegerField(
                        blank=True, help_text="Nightly price for Friday and Saturday nights.", null=True
                    ),
                ),
                ("cleaning_fee", models.PositiveBigIntegerField(default=0)),
                ("pet_fee", models.PositiveBigIntegerField(default=0, help_text="Charged once per pet.")),
                (
                    "extra_guest_fee",
                    models.PositiveBigIntegerField(default=0, help_text="Charged per guest above capacity, per night."),
                ),
                (
                    "min_nights",
                    models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("max_nights", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("instant_book", models.BooleanField(default=False)),
                ("rating_average", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_count", models.PositiveIntegerField(default=0)),
                ("rating_cleanliness", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_accuracy", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("rating_amenities", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=2)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sites",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Site",
                "verbose_name_plural": "Sites",
                "ordering": ["property_id", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("max_nights__isnull", True),
                            ("max_nights__gte", models.F("min_nights")),
                            _connector="OR",
                        ),
                        name="site_valid_stay_limits",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SiteAvailability",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("is_available", models.BooleanField(default=False)),
                (
                    "block_type",
                    models.CharField(
                        choices=[("booked", "Booked"), ("blocked", "Blocked by host"), ("maintenance", "Maintenance")],
                        max_length=20,
                    ),
                ),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "site",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability",
                        to="properties.site",
                    ),
                ),
            ],
            options={
                "verbose_name": "Site availability",
                "verbose_name_plural": "Site availability",
                "ordering": ["site_id", "date"],
                "indexes": [models.Index(fields=["date", "is_available"], name="availability_date_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("site", "date"), name="unique_site_availability_date")
                ],
            },
        ),
    ]

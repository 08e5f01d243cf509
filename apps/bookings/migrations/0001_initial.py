import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(editable=False, max_length=16, unique=True)),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("nights", models.PositiveSmallIntegerField()),
                ("guests", models.PositiveSmallIntegerField(default=1)),
                ("pets", models.PositiveSmallIntegerField(default=0)),
                ("vehicles", models.PositiveSmallIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Awaiting payment"), ("paid", "Paid"), ("failed", "Payment failed")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("payment_order_code", models.PositiveBigIntegerField(editable=False, unique=True)),
                ("checkout_url", models.URLField(blank=True, max_length=500, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("currency", models.CharField(default="VND", max_length=3)),
                ("base_price", models.PositiveBigIntegerField()),
                ("weekend_price", models.PositiveBigIntegerField(blank=True, null=True)),
                ("weekday_nights", models.PositiveSmallIntegerField(default=0)),
                ("weekend_nights", models.PositiveSmallIntegerField(default=0)),
                ("subtotal", models.PositiveBigIntegerField()),
                ("cleaning_fee", models.PositiveBigIntegerField(default=0)),
                ("pet_fee", models.PositiveBigIntegerField(default=0)),
                ("extra_guest_fee", models.PositiveBigIntegerField(default=0)),
                ("service_fee", models.PositiveBigIntegerField(default=0)),
                ("tax", models.PositiveBigIntegerField(default=0)),
                ("total", models.PositiveBigIntegerField()),
                ("guest_message", models.TextField(blank=True)),
                ("host_message", models.TextField(blank=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cancellation_source",
                    models.CharField(
                        blank=True,
                        choices=[("guest", "Guest"), ("host", "Host"), ("system", "System")],
                        max_length=20,
                    ),
                ),
                ("cancellation_reason", models.CharField(blank=True, max_length=500)),
                ("refund_amount", models.PositiveBigIntegerField(default=0)),
                ("reviewed", models.BooleanField(default=False)),
                ("review_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "site",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="properties.site",
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="properties.property",
                    ),
                ),
                (
                    "guest",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "host",
                    models.ForeignKey(
                        help_text="Owner of the property at booking time.",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="hosted_bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cancelled_bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("check_out__gt", models.F("check_in"))),
                        name="booking_valid_dates",
                    )
                ],
                "indexes": [
                    models.Index(fields=["site", "status", "check_in", "check_out"], name="booking_site_window_idx"),
                    models.Index(fields=["guest", "status"], name="booking_guest_status_idx"),
                    models.Index(fields=["host", "status"], name="booking_host_status_idx"),
                    models.Index(fields=["status", "payment_status", "created_at"], name="booking_payment_sweep_idx"),
                ],
            },
        ),
    ]

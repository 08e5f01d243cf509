import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_code", models.PositiveBigIntegerField(blank=True, db_index=True, null=True)),
                (
                    "event",
                    models.CharField(
                        choices=[("checkout_created", "Checkout link created"), ("callback", "Provider callback")],
                        default="callback",
                        max_length=20,
                    ),
                ),
                ("provider", models.CharField(default="payos", max_length=50)),
                ("provider_status", models.CharField(blank=True, max_length=50)),
                ("amount", models.PositiveBigIntegerField(blank=True, null=True)),
                (
                    "outcome",
                    models.CharField(
                        choices=[("applied", "Applied"), ("ignored", "Ignored"), ("rejected", "Rejected")],
                        max_length=20,
                    ),
                ),
                ("result_code", models.CharField(max_length=50)),
                ("message", models.CharField(blank=True, max_length=255)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_transactions",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment transaction",
                "verbose_name_plural": "Payment transactions",
                "ordering": ["-created_at"],
            },
        ),
    ]

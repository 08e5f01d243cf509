"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "site",
        "guest",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total",
        "created_at",
    )
    list_filter = ("status", "payment_status", "cancellation_source", "check_in")
    search_fields = ("code", "site__name", "property__name", "guest__email")
    raw_id_fields = ("site", "property", "guest", "host", "cancelled_by")
    readonly_fields = (
        "code",
        "payment_order_code",
        "nights",
        "subtotal",
        "total",
        "created_at",
        "updated_at",
    )

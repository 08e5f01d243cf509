"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Input of ``POST /bookings/``; business rules live in the command handler."""

    site = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    pets = serializers.IntegerField(min_value=0, default=0)
    vehicles = serializers.IntegerField(min_value=0, default=0)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class BookingActionSerializer(serializers.Serializer):
    """Optional free text sent with confirm or cancel."""

    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class BookingRefundSerializer(serializers.Serializer):
    """Amount to return; omitted means the full total."""

    amount = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    site_id = serializers.ReadOnlyField(source="site.id")
    site_name = serializers.ReadOnlyField(source="site.name")
    property_id = serializers.ReadOnlyField(source="property.id")
    property_name = serializers.ReadOnlyField(source="property.name")
    guest_id = serializers.ReadOnlyField(source="guest.id")
    host_id = serializers.ReadOnlyField(source="host.id")

    class Meta:
        model = Booking
        fields = [
            "id",
            "code",
            "site_id",
            "site_name",
            "property_id",
            "property_name",
            "guest_id",
            "host_id",
            "check_in",
            "check_out",
            "nights",
            "guests",
            "pets",
            "vehicles",
            "status",
            "payment_status",
            "checkout_url",
            "paid_at",
            "currency",
            "base_price",
            "weekend_price",
            "weekday_nights",
            "weekend_nights",
            "subtotal",
            "cleaning_fee",
            "pet_fee",
            "extra_guest_fee",
            "service_fee",
            "tax",
            "total",
            "guest_message",
            "host_message",
            "confirmed_at",
            "completed_at",
            "cancelled_at",
            "cancellation_source",
            "cancellation_reason",
            "refund_amount",
            "refunded_at",
            "reviewed",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

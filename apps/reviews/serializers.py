"""Serializers for reviews.

The write serializer only validates input; the booking, site, property
and parties of a review are derived from the booking in the service.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


def rating_field() -> serializers.IntegerField:
    return serializers.IntegerField(min_value=1, max_value=5)


class ReviewCreateSerializer(serializers.Serializer):
    """Serializer for creating a new review."""

    booking = serializers.IntegerField(min_value=1)
    location_rating = rating_field()
    communication_rating = rating_field()
    value_rating = rating_field()
    cleanliness_rating = rating_field()
    accuracy_rating = rating_field()
    amenities_rating = rating_field()
    comment = serializers.CharField(required=False, allow_blank=True, default="", max_length=5000)


class HostResponseSerializer(serializers.Serializer):
    response = serializers.CharField(max_length=2000)


class ReviewSerializer(serializers.ModelSerializer):
    """Serializer for displaying reviews."""

    booking_code = serializers.ReadOnlyField(source="booking.code")

    class Meta:
        model = Review
        fields = [
            "id",
            "booking",
            "booking_code",
            "property",
            "site",
            "guest",
            "host",
            "location_rating",
            "communication_rating",
            "value_rating",
            "cleanliness_rating",
            "accuracy_rating",
            "amenities_rating",
            "overall_rating",
            "comment",
            "is_published",
            "host_response",
            "host_response_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

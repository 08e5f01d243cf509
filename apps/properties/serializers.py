"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Property, Site, SiteAvailability


class SiteSerializer(serializers.ModelSerializer):
    property_id = serializers.ReadOnlyField(source="property.id")
    allows_pets = serializers.ReadOnlyField()

    class Meta:
        model = Site
        fields = [
            "id",
            "property_id",
            "name",
            "is_active",
            "max_guests",
            "max_pets",
            "max_vehicles",
            "allows_pets",
            "base_price",
            "weekend_price",
            "cleaning_fee",
            "pet_fee",
            "extra_guest_fee",
            "min_nights",
            "max_nights",
            "instant_book",
            "rating_average",
            "rating_count",
            "rating_cleanliness",
            "rating_accuracy",
            "rating_amenities",
        ]
        read_only_fields = [
            "rating_average",
            "rating_count",
            "rating_cleanliness",
            "rating_accuracy",
            "rating_amenities",
        ]


class SiteWriteSerializer(serializers.ModelSerializer):
    """Tariff and capacity edits apply to future bookings only."""

    class Meta:
        model = Site
        fields = [
            "property",
            "name",
            "is_active",
            "max_guests",
            "max_pets",
            "max_vehicles",
            "base_price",
            "weekend_price",
            "cleaning_fee",
            "pet_fee",
            "extra_guest_fee",
            "min_nights",
            "max_nights",
            "instant_book",
        ]

    def validate_property(self, value: Property) -> Property:
        user = self.context["request"].user
        if value.host_id != user.id and not user.is_staff:
            raise serializers.ValidationError("You can only add sites to your own properties.")
        return value

    def validate(self, attrs):  # type: ignore
        min_nights = attrs.get("min_nights", getattr(self.instance, "min_nights", 1))
        max_nights = attrs.get("max_nights", getattr(self.instance, "max_nights", None))
        if max_nights is not None and max_nights < min_nights:
            raise serializers.ValidationError({"max_nights": "Maximum stay cannot be shorter than minimum stay."})
        return attrs


class PropertySerializer(serializers.ModelSerializer):
    host_id = serializers.ReadOnlyField(source="host.id")
    sites = SiteSerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "host_id",
            "name",
            "slug",
            "description",
            "status",
            "cancellation_policy",
            "rating_average",
            "rating_count",
            "rating_location",
            "rating_communication",
            "rating_value",
            "sites",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = ["name", "slug", "description", "status", "cancellation_policy"]
        extra_kwargs = {"slug": {"required": False}}

    def create(self, validated_data):  # type: ignore
        return Property.objects.create(host=self.context["request"].user, **validated_data)


class DateWindowSerializer(serializers.Serializer):
    """Half-open ``[start, end)`` window from query parameters."""

    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["end"] <= attrs["start"]:
            raise serializers.ValidationError({"end": "End date must be after start date."})
        return attrs


class StayWindowSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    property = serializers.IntegerField(required=False, min_value=1)


class BlockDatesSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    block_type = serializers.ChoiceField(
        choices=[
            SiteAvailability.BlockType.BLOCKED,
            SiteAvailability.BlockType.MAINTENANCE,
        ],
        default=SiteAvailability.BlockType.BLOCKED,
    )
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class SiteQuoteSerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    pets = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):  # type: ignore
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs

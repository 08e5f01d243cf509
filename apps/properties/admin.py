"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, Site, SiteAvailability


class SiteInline(admin.TabularInline):
    model = Site
    extra = 0
    fields = ("name", "is_active", "max_guests", "base_price", "min_nights", "instant_book")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "host", "status", "cancellation_policy", "rating_average", "rating_count", "created_at")
    list_filter = ("status", "cancellation_policy")
    search_fields = ("name", "slug", "host__email")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = (
        "rating_average",
        "rating_count",
        "rating_location",
        "rating_communication",
        "rating_value",
        "created_at",
        "updated_at",
    )
    inlines = [SiteInline]


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ("name", "property", "is_active", "max_guests", "base_price", "instant_book", "rating_average")
    list_filter = ("is_active", "instant_book")
    search_fields = ("name", "property__name")
    raw_id_fields = ("property",)
    readonly_fields = (
        "rating_average",
        "rating_count",
        "rating_cleanliness",
        "rating_accuracy",
        "rating_amenities",
    )


@admin.register(SiteAvailability)
class SiteAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("site", "date", "is_available", "block_type", "reason")
    list_filter = ("block_type", "is_available")
    search_fields = ("site__name", "reason")
    raw_id_fields = ("site",)
    date_hierarchy = "date"

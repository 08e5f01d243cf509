"""Admin registration for reviews."""

from __future__ import annotations

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "site", "guest", "overall_rating", "is_published", "created_at")
    list_filter = ("is_published", "overall_rating")
    search_fields = ("booking__code", "site__name", "property__name", "guest__email", "comment")
    raw_id_fields = ("booking", "property", "site", "guest", "host")
    readonly_fields = ("overall_rating", "created_at", "updated_at")

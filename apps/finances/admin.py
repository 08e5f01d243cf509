"""Admin registration for payment transactions."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("order_code", "booking", "event", "provider_status", "outcome", "result_code", "created_at")
    list_filter = ("event", "outcome", "result_code", "provider")
    search_fields = ("order_code", "booking__code")
    raw_id_fields = ("booking",)
    readonly_fields = ("payload", "created_at")

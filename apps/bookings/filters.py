"""FilterSet definitions for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for ``GET /bookings/``.

    ``role`` narrows the caller's bookings to the ones they made as a guest
    or received as a host; without it both are listed.
    """

    role = django_filters.ChoiceFilter(
        method="filter_role",
        choices=(("guest", "guest"), ("host", "host")),
    )
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PaymentStatus.choices)
    site = django_filters.NumberFilter(field_name="site_id")
    check_in_from = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")
    ordering = django_filters.OrderingFilter(
        fields=(
            ("created_at", "created_at"),
            ("check_in", "check_in"),
            ("total", "total"),
        ),
    )

    class Meta:
        model = Booking
        fields = ["status", "payment_status", "site"]

    def filter_role(self, queryset, name, value):  # type: ignore
        user = getattr(self.request, "user", None)
        if user is None or not user.is_authenticated:
            return queryset.none()
        if value == "host":
            return queryset.filter(host=user)
        return queryset.filter(guest=user)

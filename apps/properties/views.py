"""Property API views."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.domain.pricing import calculate_pricing, count_nights, finalize_pricing
from apps.users.api.permissions import is_platform_admin

from .models import Property, Site
from .serializers import (
    BlockDatesSerializer,
    DateWindowSerializer,
    PropertySerializer,
    PropertyWriteSerializer,
    SiteQuoteSerializer,
    SiteSerializer,
    SiteWriteSerializer,
    StayWindowSerializer,
)
from .services import calendar_store


class IsHostOrAdmin(permissions.BasePermission):
    """Hosts manage their own properties and sites; reads are public."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        if getattr(view, "action", None) == "create":
            return hasattr(user, "is_host") and user.is_host()
        return True

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        host_id = obj.host_id if isinstance(obj, Property) else obj.property.host_id
        return host_id == user.id


class PropertyViewSet(viewsets.ModelViewSet):
    """Campgrounds; only active ones are visible to guests."""

    queryset = Property.objects.select_related("host").prefetch_related("sites")
    permission_classes = [IsHostOrAdmin]
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if not user.is_authenticated:
            return qs.filter(status=Property.Status.ACTIVE)
        if is_platform_admin(user):
            return qs
        return qs.filter(models.Q(status=Property.Status.ACTIVE) | models.Q(host=user))

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        property_obj = serializer.save()
        return Response(PropertySerializer(property_obj).data, status=status.HTTP_201_CREATED)


class SiteViewSet(viewsets.ModelViewSet):
    """Bookable sites with their calendar endpoints."""

    queryset = Site.objects.select_related("property").all()
    permission_classes = [IsHostOrAdmin]
    filterset_fields = ["property", "is_active", "instant_book"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        public = models.Q(property__status=Property.Status.ACTIVE)
        if not user.is_authenticated:
            return qs.filter(public)
        if is_platform_admin(user):
            return qs
        return qs.filter(public | models.Q(property__host=user))

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "partial_update"}:
            return SiteWriteSerializer
        if self.action == "blocks":
            return BlockDatesSerializer
        return SiteSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        site = serializer.save()
        return Response(SiteSerializer(site).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        # Sites with bookings are deactivated, not deleted
        site = self.get_object()
        site.is_active = False
        site.save(update_fields=["is_active", "updated_at"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="blocked-dates")
    def blocked_dates(self, request, pk=None):  # type: ignore
        """Nights in ``[start, end)`` that cannot be booked."""
        site = self.get_object()
        window = DateWindowSerializer(data=request.query_params)
        window.is_valid(raise_exception=True)

        dates = calendar_store.blocked_dates(site, window.validated_data["start"], window.validated_data["end"])
        return Response(
            {
                "site_id": site.id,
                "start": window.validated_data["start"],
                "end": window.validated_data["end"],
                "dates": dates,
            }
        )

    @action(detail=True, methods=["post", "delete"])
    def blocks(self, request, pk=None):  # type: ignore
        """Host blocks (POST) or reopens (DELETE) a range of nights."""
        site = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if request.method == "DELETE":
            released = calendar_store.unblock_dates(site, data["check_in"], data["check_out"])
            return Response({"site_id": site.id, "released": released})

        claimed = calendar_store.block_dates(
            site,
            data["check_in"],
            data["check_out"],
            block_type=data["block_type"],
            reason=data["reason"],
        )
        return Response({"site_id": site.id, "blocked": claimed}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def quote(self, request, pk=None):  # type: ignore
        """Availability and the price of a prospective stay, without holding anything."""
        site = self.get_object()
        window = SiteQuoteSerializer(data=request.query_params)
        window.is_valid(raise_exception=True)
        data = window.validated_data

        blocked = calendar_store.blocked_dates(site, data["check_in"], data["check_out"])
        # Priced as confirmation would charge it, fees and tax included
        pricing = calculate_pricing(
            base_price=site.base_price,
            nights=count_nights(data["check_in"], data["check_out"]),
            guests=data["guests"],
            max_guests=site.max_guests,
            pets=data["pets"],
            pet_fee=site.pet_fee,
            extra_guest_fee=site.extra_guest_fee,
            cleaning_fee=site.cleaning_fee,
            weekend_price=site.weekend_price,
            check_in=data["check_in"],
        )
        pricing = finalize_pricing(
            pricing,
            service_fee_bps=settings.BOOKING_SERVICE_FEE_BPS,
            tax_bps=settings.BOOKING_TAX_BPS,
        )
        return Response(
            {
                "site_id": site.id,
                "check_in": data["check_in"],
                "check_out": data["check_out"],
                "available": not blocked,
                "unavailable_dates": blocked,
                "pricing": pricing.as_snapshot(),
            }
        )

    @action(detail=False, methods=["get"])
    def unavailable(self, request):  # type: ignore
        """IDs of sites that cannot take the whole stay, for search filtering."""
        window = StayWindowSerializer(data=request.query_params)
        window.is_valid(raise_exception=True)
        data = window.validated_data

        site_ids = None
        if data.get("property"):
            site_ids = Site.objects.filter(property_id=data["property"]).values_list("id", flat=True)

        unavailable = calendar_store.unavailable_site_ids(data["check_in"], data["check_out"], site_ids)
        return Response({"site_ids": sorted(unavailable)})

"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import is_platform_admin

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RefundBookingCommand,
    RefundBookingHandler,
)
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingActionSerializer,
    BookingCreateSerializer,
    BookingRefundSerializer,
    BookingSerializer,
)


class IsBookingStakeholder(permissions.BasePermission):
    """The guest, the host and platform admins can see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        return obj.is_party(user.id)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings are created and moved through their lifecycle, never edited or deleted."""

    queryset = Booking.objects.select_related("site", "property", "guest", "host").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filterset_class = BookingFilterSet
    lookup_field = "code"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action in ("confirm", "cancel", "complete"):
            return BookingActionSerializer
        if self.action == "refund":
            return BookingRefundSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if is_platform_admin(user):
            return qs
        return qs.filter(Q(guest=user) | Q(host=user))

    def _respond(self, booking: Booking, status_code=status.HTTP_200_OK) -> Response:
        booking.refresh_from_db()
        data = BookingSerializer(booking, context=self.get_serializer_context()).data
        return Response(data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = CreateBookingHandler().handle(
            CreateBookingCommand(
                site_id=data["site"],
                guest_id=request.user.id,
                check_in=data["check_in"],
                check_out=data["check_out"],
                guests=data["guests"],
                pets=data["pets"],
                vehicles=data["vehicles"],
                guest_message=data["message"],
            )
        )
        return self._respond(booking, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def confirm(self, request, code=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = ConfirmBookingHandler().handle(
            ConfirmBookingCommand(
                booking_id=booking.pk,
                actor_id=request.user.id,
                host_message=serializer.validated_data["message"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, code=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=booking.pk,
                actor_id=request.user.id,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def complete(self, request, code=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore

        booking = CompleteBookingHandler().handle(
            CompleteBookingCommand(booking_id=booking.pk, actor_id=request.user.id)
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def refund(self, request, code=None):  # type: ignore
        """Host returns money on a paid booking, cancelling it first if it is still confirmed."""
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = RefundBookingHandler().handle(
            RefundBookingCommand(
                booking_id=booking.pk,
                actor_id=request.user.id,
                amount=serializer.validated_data["amount"],
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

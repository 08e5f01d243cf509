"""API views for managing reviews."""

from __future__ import annotations

from django.db import models  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import IsPlatformAdmin, is_platform_admin

from .models import Review
from .serializers import HostResponseSerializer, ReviewCreateSerializer, ReviewSerializer
from .services import create_review, respond, set_published


class ReviewViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reviews are public once published; authors, hosts and admins also see unpublished ones."""

    queryset = Review.objects.select_related("booking", "site", "property").all()
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filterset_fields = ["site", "property"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        if self.action == "respond":
            return HostResponseSerializer
        return ReviewSerializer

    def get_permissions(self):  # type: ignore
        if self.action in ("publish", "unpublish"):
            return [IsPlatformAdmin()]
        if self.action == "respond":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user

        if not user.is_authenticated:
            return qs.filter(is_published=True)
        if is_platform_admin(user):
            return qs
        return qs.filter(models.Q(is_published=True) | models.Q(guest=user) | models.Q(host=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        review = create_review(
            booking_id=data.pop("booking"),
            guest_id=request.user.id,
            comment=data.pop("comment"),
            ratings=data,
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):  # type: ignore
        review = set_published(self.get_object(), True)
        return Response(ReviewSerializer(review).data)

    @action(detail=True, methods=["post"])
    def unpublish(self, request, pk=None):  # type: ignore
        review = set_published(self.get_object(), False)
        return Response(ReviewSerializer(review).data)

    @action(detail=True, methods=["post"])
    def respond(self, request, pk=None):  # type: ignore
        """Host response to a review."""
        review = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = respond(review, request.user.id, serializer.validated_data["response"])
        return Response(ReviewSerializer(review).data, status=status.HTTP_200_OK)

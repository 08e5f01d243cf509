"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertyViewSet, SiteViewSet

router = DefaultRouter()
# "sites" goes first so the empty prefix does not capture it as a property pk
router.register(r"sites", SiteViewSet, basename="site")
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    path("", include(router.urls)),
]

"""Permission helpers shared by the domain APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_platform_admin(user) -> bool:
    """Role admins, staff and superusers; anonymous users never qualify."""
    if not getattr(user, "is_authenticated", False):
        return False
    return hasattr(user, "is_platform_admin") and user.is_platform_admin()


class IsPlatformAdmin(permissions.BasePermission):
    """Only platform admins may access."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_platform_admin(request.user)

"""Permission classes for the membership API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

from apps.users import policy


class IsAdminRole(permissions.BasePermission):
    """
    Allow Super Admins and agency admins.

    Plain members get a 403 with the policy's message.
    """

    message = "Insufficient permissions"

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return policy.can_manage_members(user)


class IsSuperAdmin(permissions.BasePermission):
    """Only Super Admins."""

    message = "Access denied"

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return policy.is_super_admin(user)

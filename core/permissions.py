"""
Core Permissions - Role-Based Permission Classes

USAGE:
    from core.permissions import IsVolunteer, IsOrganization, IsPlatformAdmin

ROLE-BASED:
   - IsVolunteer: volunteer accounts only
   - IsOrganization: organization accounts only
   - IsPlatformAdmin: platform administrators (admin role or superuser)
"""

from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView


def _has_role(user, role: str) -> bool:
    return bool(user and user.is_authenticated and getattr(user, 'role', None) == role)


class IsVolunteer(permissions.BasePermission):
    """Allow access only to volunteer accounts."""

    message = "Only volunteers can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return _has_role(request.user, 'volunteer')


class IsOrganization(permissions.BasePermission):
    """Allow access only to organization accounts."""

    message = "Only organizations can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return _has_role(request.user, 'organization')


class IsPlatformAdmin(permissions.BasePermission):
    """Allow access to platform administrators."""

    message = "Only platform administrators can perform this action."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_superuser or getattr(user, 'role', None) == 'admin'

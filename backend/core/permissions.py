"""
Permission classes for role-based access control.

Role is read from request.user (authenticated via JWT).
Role is NEVER read from request body, query parameters, or headers.
ADMIN passes every role check.
"""

from rest_framework import permissions


class RolePermission(permissions.BasePermission):
    """Allow users whose role is in allowed_roles (ADMIN always allowed)."""

    allowed_roles = ()

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        role = getattr(request.user, "role", None)
        if role is None:
            return False

        if role == "ADMIN":
            return True

        return role in self.allowed_roles


class IsManager(RolePermission):
    """Allow MANAGER role only."""

    allowed_roles = ("MANAGER",)


class IsTTO(RolePermission):
    """Allow TTO role only."""

    allowed_roles = ("TTO",)


class IsEngineer(RolePermission):
    """Allow ENGINEER role only."""

    allowed_roles = ("ENGINEER",)


class IsSeller(RolePermission):
    """Allow SELLER role only."""

    allowed_roles = ("SELLER",)


class IsAdmin(RolePermission):
    """Allow ADMIN role only."""

    allowed_roles = ()


class IsAuthenticatedUser(RolePermission):
    """Allow any authenticated user that carries a known role."""

    allowed_roles = ("EMPLOYEE", "MANAGER", "TTO", "ENGINEER", "SELLER")


DASHBOARD_PERMISSIONS = {
    "manager": IsManager,
    "tto": IsTTO,
    "engineer": IsEngineer,
}

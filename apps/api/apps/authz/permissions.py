"""
Authz permissions shared by the scheduling and consultation endpoints.
"""
from rest_framework import permissions
from apps.authz.models import RoleChoices


class IsAdmin(permissions.BasePermission):
    """
    Permission class that only allows Admin role users.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_admin


class IsClinicalStaff(permissions.BasePermission):
    """
    Clinicians and admins. System actors never call the API as users.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        user_roles = set(
            request.user.user_roles.values_list('role__name', flat=True)
        )
        if RoleChoices.SYSTEM in user_roles:
            return False
        return request.user.is_superuser or bool(
            user_roles & {RoleChoices.ADMIN, RoleChoices.CLINICIAN}
        )

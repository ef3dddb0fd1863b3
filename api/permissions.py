"""
Role permissions - admins manage data, viewers only read it
"""
from rest_framework import permissions

from core.constants import UserRole, UserStatus


class IsActiveUser(permissions.BasePermission):
    """
    Authenticated and not suspended.
    """
    message = "Your account has been suspended"

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return getattr(user, 'status', UserStatus.ACTIVE) == UserStatus.ACTIVE


class IsAdminRole(permissions.BasePermission):
    """
    Permission to allow only the admin role
    """
    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.role == UserRole.ADMIN or user.is_superuser


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Viewers may read, only admins may write
    """
    message = "Admin access required"

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return user.role == UserRole.ADMIN or user.is_superuser

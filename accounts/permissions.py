"""
Role-based DRF permissions shared by the marketplace apps.
"""
from rest_framework import permissions


class IsMarketplaceAdmin(permissions.BasePermission):
    """
    Permission for moderators (publish, block, expiry sweep).
    """

    message = 'Only administrators can perform this action'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            (request.user.role == 'ADMIN' or request.user.is_superuser)
        )

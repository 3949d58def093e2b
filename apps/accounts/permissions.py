"""
Custom permission classes shared by every venue app.

Permission Classes:
    IsVenueAdmin - Admin role (or Django superuser)
    HasBranch - User is assigned to a branch

Usage:
    from apps.accounts.permissions import IsVenueAdmin, HasBranch

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, HasBranch])
    def ticket_stats(request):
        ...
"""

from rest_framework.permissions import BasePermission


class IsVenueAdmin(BasePermission):
    """Allow only users with the admin role."""

    message = 'Admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_venue_admin)


class HasBranch(BasePermission):
    """
    Allow only users assigned to a branch.

    Tickets, sales, expenses and reports are all scoped to the
    requesting user's branch, so a user without one cannot use them.
    """

    message = 'You must be assigned to a branch.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.branch_id)

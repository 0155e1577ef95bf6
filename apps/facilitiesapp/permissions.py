# apps/facilitiesapp/permissions.py
from rest_framework import permissions

STAFF_ONLY_ACTIONS = ("confirm", "reject")


class FacilityPermission(permissions.BasePermission):
    """
    Permission class for facilities.

    - Any authenticated user can read facilities and their availability
    - Staff manage facilities and their schedule exceptions
    """

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return request.user.is_staff


class FacilityReservationPermission(permissions.BasePermission):
    """
    Permission class for facility reservations.

    - Authenticated users can list, create and preview reservations
    - Owners and staff can change or cancel a reservation
    - Only staff can confirm or reject
    """

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        if view.action in STAFF_ONLY_ACTIONS:
            return request.user.is_staff

        return True

    def has_object_permission(self, request, view, obj):
        user = request.user

        if user.is_staff:
            return True

        if view.action in STAFF_ONLY_ACTIONS:
            return False

        return obj.user_id == user.id

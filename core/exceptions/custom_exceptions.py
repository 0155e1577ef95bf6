"""
Service-layer exceptions for Stablebook.

Services raise these; the API exception handler turns each into a response
with the class's status code and a body of the form
``{"error": <error_code>, "message": ..., "details": <errors>}``.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status


class APIException(Exception):
    """
    Base class: a message for the client, an HTTP status and optional
    structured details (``errors``).
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = _("An unexpected error occurred.")

    def __init__(self, message=None, status_code=None, errors=None):
        self.message = message or self.default_message
        if status_code:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)

    @property
    def error_code(self):
        """BookingRejectedException -> "booking_rejected" """
        name = self.__class__.__name__.replace("Exception", "")
        return "".join(
            f"_{char.lower()}" if char.isupper() and index else char.lower()
            for index, char in enumerate(name)
        )

    def to_dict(self):
        error_dict = {
            "message": str(self.message),
            "status_code": self.status_code,
            "code": self.__class__.__name__,
        }

        if self.errors:
            error_dict["errors"] = self.errors

        return error_dict


class InvalidDataException(APIException):
    """Bad input that serializers cannot catch, e.g. too many horses or an invalid schedule exception."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _("Invalid data provided.")


class ResourceNotFoundException(APIException):
    """Unknown facility, reservation or schedule exception date."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = _("The requested resource was not found.")


class PermissionDeniedException(APIException):
    """Non-staff review actions, overrides, or changes to someone else's reservation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = _("You do not have permission to perform this action.")


class DuplicateResourceException(APIException):
    """A schedule exception already exists for the date."""

    status_code = status.HTTP_409_CONFLICT
    default_message = _("A resource with this identifier already exists.")


class InvalidOperationException(APIException):
    """A status transition the reservation's current state does not allow."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _("This operation is not valid in the current state.")


class BookingRejectedException(APIException):
    """
    The locked re-validation refused a reservation.

    The message is the validator's own, so the caller sees the same reason
    the preview endpoint would have returned; ``errors["code"]`` holds the
    result code.
    """

    status_code = status.HTTP_409_CONFLICT
    default_message = _("The requested booking could not be made.")

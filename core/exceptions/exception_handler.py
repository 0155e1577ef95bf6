"""
Global exception handler for the Stablebook platform.

This module provides a custom exception handler for DRF that handles
custom exceptions and provides consistent error responses.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.utils import (
    DatabaseError,
    DataError,
    IntegrityError,
    OperationalError,
    ProgrammingError,
)
from django.http import Http404
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import (
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .custom_exceptions import APIException

logger = logging.getLogger(__name__)


def get_error_code(exception: Exception) -> str:
    """
    Get standardized error code from exception.

    Args:
        exception: The exception to get code for

    Returns:
        str: Standardized error code
    """
    if isinstance(exception, APIException):
        return exception.error_code
    elif isinstance(exception, ValidationError):
        return "validation_error"
    elif isinstance(exception, (PermissionDenied, DRFPermissionDenied)):
        return "permission_denied"
    elif isinstance(exception, (Http404, NotFound, ObjectDoesNotExist)):
        return "not_found"
    elif isinstance(exception, IntegrityError):
        return "integrity_error"
    elif isinstance(exception, DataError):
        return "data_error"
    elif isinstance(exception, DatabaseError):
        return "database_error"
    elif isinstance(exception, NotAuthenticated):
        return "authentication_required"
    else:
        # Convert exception class name to snake case
        return (
            exception.__class__.__name__.lower()
            .replace("error", "")
            .replace("exception", "")
        )


def get_error_message(exception: Exception) -> str:
    """
    Get a user-facing error message for exception.

    Args:
        exception: The exception

    Returns:
        str: Error message
    """
    if isinstance(exception, APIException):
        return str(exception.message)

    if hasattr(exception, "detail") and isinstance(exception.detail, str):
        return str(exception.detail)

    if isinstance(exception, ValidationError):
        return str(_("Invalid input."))
    elif isinstance(exception, IntegrityError):
        return str(_("A conflict occurred with existing data."))
    elif isinstance(exception, DatabaseError):
        return str(_("A database error occurred. Please try again later."))
    elif isinstance(exception, (ObjectDoesNotExist, Http404)):
        return str(_("The requested resource was not found."))

    return str(_("An error occurred processing your request."))


def get_error_details(exception: Exception) -> Optional[Dict[str, Any]]:
    """
    Get detailed error information from exception.

    Args:
        exception: The exception

    Returns:
        Optional[Dict]: Error details if available
    """
    if isinstance(exception, APIException) and exception.errors:
        return exception.errors

    # For validation errors, return formatted validation details
    if (
        isinstance(exception, ValidationError)
        and hasattr(exception, "detail")
        and not isinstance(exception.detail, str)
    ):
        if isinstance(exception.detail, list):
            return {"validation_errors": exception.detail}
        return exception.detail

    if isinstance(exception, IntegrityError):
        error_str = str(exception).lower()
        if "unique constraint" in error_str:
            return {"type": "unique_constraint_violation"}
        elif "foreign key constraint" in error_str:
            return {"type": "foreign_key_constraint_violation"}
        elif "check constraint" in error_str:
            return {"type": "check_constraint_violation"}

    return None


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Custom exception handler for DRF views.

    Handles both DRF and custom exceptions, providing consistent response format.

    Args:
        exc: The exception
        context: The exception context

    Returns:
        Response: Consistent error response
    """
    # Handle Django ValidationError by converting to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            exc = ValidationError(detail=exc.message_dict)
        else:
            exc = ValidationError(detail=exc.messages)

    response = drf_exception_handler(exc, context)

    error_code = get_error_code(exc)
    error_message = get_error_message(exc)
    error_details = get_error_details(exc)
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else None

    if isinstance(exc, APIException) and exc.status_code < 500:
        logger.warning(f"{view_name}: {error_code} - {error_message}")
    elif isinstance(
        exc,
        (ValidationError, Http404, NotFound, NotAuthenticated, PermissionDenied, DRFPermissionDenied),
    ):
        logger.warning(
            f"Exception: {error_code} - {error_message}\n"
            f"View: {view_name}\n"
            f"Details: {error_details}"
        )
    elif response is None:
        logger.error(
            f"Exception: {error_code} - {error_message}\n"
            f"View: {view_name}\n"
            f"Traceback: {traceback.format_exc()}"
        )

    body = {
        "error": error_code,
        "message": error_message,
        **({"details": error_details} if error_details is not None else {}),
    }

    if isinstance(exc, APIException):
        return Response(body, status=exc.status_code)

    if isinstance(exc, IntegrityError):
        body["message"] = str(_("A conflict occurred with the existing data"))
        return Response(body, status=status.HTTP_409_CONFLICT)
    elif isinstance(exc, (OperationalError, ProgrammingError)):
        body["message"] = str(_("A database error occurred"))
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # If DRF handled the exception, standardize the response format
    if response is not None:
        response.data = body
        return response

    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

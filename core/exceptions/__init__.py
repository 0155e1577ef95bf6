"""
Stablebook – centralised custom exceptions.

Import these from `core.exceptions` across the project instead of redefining
ad-hoc `Exception` subclasses in each app.
"""

from .custom_exceptions import (
    APIException,
    BookingRejectedException,
    DuplicateResourceException,
    InvalidDataException,
    InvalidOperationException,
    PermissionDeniedException,
    ResourceNotFoundException,
)

__all__ = [
    "APIException",
    "BookingRejectedException",
    "DuplicateResourceException",
    "InvalidDataException",
    "InvalidOperationException",
    "PermissionDeniedException",
    "ResourceNotFoundException",
]

# tests/core/test_exceptions.py
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.test import SimpleTestCase

from core.exceptions import (
    BookingRejectedException,
    DuplicateResourceException,
    InvalidDataException,
    ResourceNotFoundException,
)
from core.exceptions.exception_handler import exception_handler


class ExceptionHierarchyTest(SimpleTestCase):
    def test_error_codes(self):
        self.assertEqual(BookingRejectedException().error_code, "booking_rejected")
        self.assertEqual(ResourceNotFoundException().error_code, "resource_not_found")
        self.assertEqual(DuplicateResourceException().error_code, "duplicate_resource")

    def test_to_dict(self):
        exc = BookingRejectedException("Booking quota exceeded", errors={"code": "quota_exceeded"})

        self.assertEqual(
            exc.to_dict(),
            {
                "message": "Booking quota exceeded",
                "status_code": 409,
                "code": "BookingRejectedException",
                "errors": {"code": "quota_exceeded"},
            },
        )

    def test_default_message(self):
        self.assertEqual(str(InvalidDataException().message), "Invalid data provided.")


class ExceptionHandlerTest(SimpleTestCase):
    """Test cases for the API exception handler"""

    def test_custom_exception(self):
        response = exception_handler(
            BookingRejectedException("Time slot conflicts with 1 existing booking", errors={"code": "time_conflict"}),
            {},
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.data,
            {
                "error": "booking_rejected",
                "message": "Time slot conflicts with 1 existing booking",
                "details": {"code": "time_conflict"},
            },
        )

    def test_django_validation_error(self):
        response = exception_handler(DjangoValidationError({"timezone": ["Unknown time zone"]}), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "validation_error")
        self.assertEqual(response.data["details"], {"timezone": ["Unknown time zone"]})

    def test_integrity_error(self):
        response = exception_handler(IntegrityError("CHECK constraint failed"), {})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"], "integrity_error")

# apps/facilitiesapp/services/facility_service.py
import copy
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from django.conf import settings
from django.db import transaction

from algorithms.availability.slot_generator import DEFAULT_SLOT_MINUTES, Slot, SlotGenerator
from algorithms.availability.time_blocks import (
    EXCEPTION_MODIFIED,
    MAX_SCHEDULE_EXCEPTIONS,
    TimeBlock,
    default_schedule,
    validate_exception,
)
from apps.facilitiesapp.models import Facility, FacilityReservation
from apps.facilitiesapp.services.timeblock_cache import timeblock_cache
from core.exceptions import (
    DuplicateResourceException,
    InvalidDataException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)


class FacilityService:
    """Schedule maintenance and availability queries for facilities"""

    @staticmethod
    def _lock_facility(facility_id) -> Facility:
        try:
            return Facility.objects.select_for_update().get(id=facility_id)
        except (Facility.DoesNotExist, ValueError):
            raise ResourceNotFoundException(f"Facility {facility_id} not found")

    @staticmethod
    @transaction.atomic
    def add_schedule_exception(
        facility_id,
        exception_date: date,
        exception_type: str,
        time_blocks: Optional[list] = None,
        reason: str = "",
        user=None,
    ) -> dict:
        """
        Add a date-specific exception to a facility's availability pattern.

        Args:
            facility_id: Facility to change
            exception_date: The date the exception applies to
            exception_type: "closed" or "modified"
            time_blocks: Open blocks for a "modified" exception
            reason: Optional note shown to bookers
            user: The staff member making the change

        Returns:
            The stored exception entry

        Raises:
            DuplicateResourceException: If the date already has an exception
            InvalidDataException: If the entry is invalid or the limit is reached
        """
        facility = FacilityService._lock_facility(facility_id)
        schedule = copy.deepcopy(facility.availability_schedule or default_schedule())
        exceptions = schedule.setdefault("exceptions", [])

        entry = {
            "date": exception_date.isoformat(),
            "type": exception_type,
            "reason": reason or "",
        }
        if exception_type == EXCEPTION_MODIFIED:
            entry["time_blocks"] = time_blocks or []

        errors = validate_exception(entry)
        if errors:
            raise InvalidDataException("Invalid schedule exception", errors={"exception": errors})

        if any(existing.get("date") == entry["date"] for existing in exceptions):
            raise DuplicateResourceException(
                f"An exception already exists for {entry['date']}"
            )

        limit = getattr(settings, "FACILITY_MAX_SCHEDULE_EXCEPTIONS", MAX_SCHEDULE_EXCEPTIONS)
        if len(exceptions) >= limit:
            raise InvalidDataException(f"Maximum of {limit} exceptions allowed")

        if user is not None:
            entry["created_by"] = str(user.id)
        exceptions.append(entry)
        exceptions.sort(key=lambda item: item.get("date", ""))

        facility.availability_schedule = schedule
        facility.save(update_fields=["availability_schedule", "updated_at"])

        logger.info(f"Schedule exception added: Facility={facility.id}, Date={entry['date']}")
        return entry

    @staticmethod
    @transaction.atomic
    def remove_schedule_exception(facility_id, exception_date: date) -> None:
        """Remove the exception for a date; 404 if there is none"""
        facility = FacilityService._lock_facility(facility_id)
        schedule = copy.deepcopy(facility.availability_schedule or default_schedule())
        exceptions = schedule.get("exceptions") or []
        date_key = exception_date.isoformat()

        remaining = [item for item in exceptions if item.get("date") != date_key]
        if len(remaining) == len(exceptions):
            raise ResourceNotFoundException(f"No exception found for {date_key}")

        schedule["exceptions"] = remaining
        facility.availability_schedule = schedule
        facility.save(update_fields=["availability_schedule", "updated_at"])

        logger.info(f"Schedule exception removed: Facility={facility.id}, Date={date_key}")

    @staticmethod
    def get_time_blocks(facility: Facility, target_date: date) -> List[TimeBlock]:
        return timeblock_cache.get_blocks(facility, target_date)

    @staticmethod
    def day_reservations(facility: Facility, target_date: date) -> List[FacilityReservation]:
        """Active reservations touching the facility's local day"""
        tzinfo = facility.tzinfo
        day_start = datetime.combine(target_date, time(0, 0), tzinfo=tzinfo)
        day_end = datetime.combine(target_date + timedelta(days=1), time(0, 0), tzinfo=tzinfo)
        return list(
            FacilityReservation.objects.filter(
                facility=facility,
                status__in=FacilityReservation.ACTIVE_STATUSES,
                start_time__lt=day_end,
                end_time__gt=day_start,
            )
        )

    @staticmethod
    def default_slot_minutes() -> int:
        return getattr(settings, "FACILITY_DEFAULT_SLOT_MINUTES", DEFAULT_SLOT_MINUTES)

    @staticmethod
    def list_available_slots(
        facility: Facility, target_date: date, slot_duration: Optional[int] = None
    ) -> List[Slot]:
        """
        Free slots on a facility for one date.

        slot_duration defaults to the facility's minimum slot duration, then
        to the FACILITY_DEFAULT_SLOT_MINUTES setting.
        """
        if slot_duration is None:
            slot_duration = (
                facility.min_slot_duration_minutes or FacilityService.default_slot_minutes()
            )
        if slot_duration <= 0:
            raise InvalidDataException("slot_duration must be a positive number of minutes")

        generator = SlotGenerator(resolver=timeblock_cache)
        reservations = FacilityService.day_reservations(facility, target_date)
        return list(generator.available_slots(facility, target_date, reservations, slot_duration))

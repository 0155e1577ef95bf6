# apps/facilitiesapp/services/booking_validator.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from algorithms.availability.capacity_sweep import peak_concurrent_occupants
from algorithms.availability.conflict_detector import TimeRange, find_conflicts
from algorithms.availability.slot_generator import BlockResolver, schedule_resolver
from algorithms.availability.time_blocks import END_OF_DAY, is_interval_within_blocks

logger = logging.getLogger(__name__)

# Result codes, stable for API clients
OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
FACILITY_CLOSED = "facility_closed"
TIME_CONFLICT = "time_conflict"
DURATION_TOO_SHORT = "duration_too_short"
DURATION_TOO_LONG = "duration_too_long"
CAPACITY_EXCEEDED = "capacity_exceeded"
QUOTA_EXCEEDED = "quota_exceeded"


@dataclass
class ValidationResult:
    """
    Outcome of a validation pass.

    error is set iff valid is False. warnings are non-blocking and may be
    present on a valid result.
    """

    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, warnings: Optional[List[str]] = None) -> "ValidationResult":
        return cls(valid=True, warnings=list(warnings or []))

    @classmethod
    def fail(cls, code: str, error: str) -> "ValidationResult":
        return cls(valid=False, error=error, code=code)

    def to_dict(self):
        data = {"valid": self.valid, "warnings": list(self.warnings)}
        if not self.valid:
            data["error"] = self.error
            data["code"] = self.code
        return data


@dataclass(frozen=True)
class QuotaInfo:
    has_quota: bool = True
    remaining: Optional[int] = None
    total: Optional[int] = None


def format_hours(value: Any) -> str:
    """Render a decimal hour limit without trailing zeros (4.00 -> "4")."""
    return f"{Decimal(str(value)).normalize():f}"


def to_local(value: datetime, tzinfo) -> datetime:
    if tzinfo is None or value.tzinfo is None:
        return value
    return value.astimezone(tzinfo)


def wall_clock_range(start: datetime, end: datetime, tzinfo=None):
    """
    Convert an interval to (date, "HH:MM", "HH:MM") in the facility's zone.

    An end at the next local midnight is reported as "24:00" of the start
    date. Returns None for an interval that spans more than one local date.
    """
    local_start = to_local(start, tzinfo)
    local_end = to_local(end, tzinfo)
    start_clock = local_start.strftime("%H:%M")

    if local_end.date() == local_start.date():
        return local_start.date(), start_clock, local_end.strftime("%H:%M")

    next_day = local_start.date() + timedelta(days=1)
    if local_end.date() == next_day and local_end.time().replace(second=0, microsecond=0) == time(0, 0):
        return local_start.date(), start_clock, END_OF_DAY

    return None


class BookingValidator:
    """
    Decides whether a reservation may be created or moved.

    Checks run in a fixed order and stop at the first failure: business
    hours, conflicts, minimum duration, maximum duration, capacity, and on
    the move path the quota hook. The validator holds no state between calls
    and never touches the database; callers supply the reservation snapshot.
    """

    def __init__(self, resolver: Optional[BlockResolver] = None, exclusive_handoff: bool = False):
        self.resolver = resolver or schedule_resolver
        self.exclusive_handoff = exclusive_handoff

    def check_business_hours(self, facility, start: datetime, end: datetime) -> ValidationResult:
        tzinfo = getattr(facility, "tzinfo", None)
        clock_range = wall_clock_range(start, end, tzinfo)
        if clock_range is None:
            local_start = to_local(start, tzinfo).strftime("%H:%M")
            local_end = to_local(end, tzinfo).strftime("%H:%M")
            return ValidationResult.fail(
                OUTSIDE_BUSINESS_HOURS,
                f"Selected time ({local_start}-{local_end}) is outside facility business hours",
            )

        local_date, start_clock, end_clock = clock_range
        blocks = self.resolver(facility, local_date)
        if not blocks:
            return ValidationResult.fail(
                FACILITY_CLOSED,
                f"Selected time ({start_clock}-{end_clock}) is outside facility business hours: "
                f"the facility is closed on this date",
            )

        if not is_interval_within_blocks(blocks, start_clock, end_clock):
            return ValidationResult.fail(
                OUTSIDE_BUSINESS_HOURS,
                f"Selected time ({start_clock}-{end_clock}) is outside facility business hours",
            )
        return ValidationResult.ok()

    @staticmethod
    def check_conflicts(conflicts: List[Any]) -> ValidationResult:
        if conflicts:
            count = len(conflicts)
            # Only the count is reported; other bookers' times stay private
            return ValidationResult.fail(
                TIME_CONFLICT,
                f"Time slot conflicts with {count} existing booking{'s' if count > 1 else ''}",
            )
        return ValidationResult.ok()

    @staticmethod
    def check_duration(facility, start: datetime, end: datetime) -> ValidationResult:
        duration = TimeRange(start, end).rounded().duration_minutes

        minimum = getattr(facility, "min_slot_duration_minutes", None)
        if minimum and duration < minimum:
            return ValidationResult.fail(
                DURATION_TOO_SHORT, f"Minimum booking duration is {minimum} minutes"
            )

        maximum = getattr(facility, "max_hours_per_reservation", None)
        if maximum and Decimal(duration) / 60 > Decimal(str(maximum)):
            return ValidationResult.fail(
                DURATION_TOO_LONG, f"Maximum booking duration is {format_hours(maximum)} hours"
            )
        return ValidationResult.ok()

    def check_capacity(self, facility, conflicts: List[Any], occupant_count: int) -> ValidationResult:
        max_capacity = facility.max_concurrent_occupants
        info = peak_concurrent_occupants(
            conflicts, max_capacity, exclusive_handoff=self.exclusive_handoff
        )
        if occupant_count > info.remaining_capacity:
            return ValidationResult.fail(
                CAPACITY_EXCEEDED,
                f"Facility capacity exceeded: only {info.remaining_capacity} of "
                f"{max_capacity} places available",
            )
        return ValidationResult.ok()

    def has_quota(self, user, facility, start: datetime, reservations: Iterable[Any]) -> QuotaInfo:
        """
        Per-user booking allowance hook.

        No allowance rules exist yet, so every user has unlimited quota.
        """
        return QuotaInfo(has_quota=True)

    def _validate(
        self,
        facility,
        start: datetime,
        end: datetime,
        reservations: List[Any],
        occupant_count: int,
        exclude_id: Any = None,
        enforce_business_hours: bool = True,
    ) -> ValidationResult:
        if enforce_business_hours:
            result = self.check_business_hours(facility, start, end)
            if not result.valid:
                return result

        conflicts = find_conflicts(facility.id, start, end, reservations, exclude_id=exclude_id)
        shared = getattr(facility, "max_concurrent_occupants", None) is not None
        if not shared:
            result = self.check_conflicts(conflicts)
            if not result.valid:
                return result

        result = self.check_duration(facility, start, end)
        if not result.valid:
            return result

        if shared:
            result = self.check_capacity(facility, conflicts, occupant_count)
            if not result.valid:
                return result

        return ValidationResult.ok()

    def validate_new_booking(
        self,
        facility,
        start: datetime,
        end: datetime,
        reservations: Iterable[Any],
        occupant_count: int = 1,
        enforce_business_hours: bool = True,
    ) -> ValidationResult:
        """
        Validate a reservation that does not exist yet.

        Args:
            facility: Facility to book
            start: Requested start instant
            end: Requested end instant
            reservations: Existing reservations to check against
            occupant_count: Horses the new reservation brings
            enforce_business_hours: False skips the business-hours check

        Returns:
            ValidationResult of the first failing check, or a valid result
        """
        result = self._validate(
            facility,
            start,
            end,
            list(reservations),
            occupant_count,
            enforce_business_hours=enforce_business_hours,
        )
        if not result.valid:
            logger.debug(f"New booking on facility {facility.id} rejected: {result.code}")
        return result

    def validate_booking_move(
        self,
        reservation,
        target_facility,
        new_start: datetime,
        new_end: datetime,
        reservations: Iterable[Any],
        occupant_count: Optional[int] = None,
        user=None,
        enforce_business_hours: bool = True,
    ) -> ValidationResult:
        """
        Validate moving an existing reservation to a new facility or time.

        The reservation itself is excluded from the conflict pool, so a move
        that only shifts it within its own window never conflicts with itself.
        """
        reservations = list(reservations)
        if occupant_count is None:
            occupant_count = getattr(reservation, "occupant_count", 0) or 0

        result = self._validate(
            target_facility,
            new_start,
            new_end,
            reservations,
            occupant_count,
            exclude_id=reservation.id,
            enforce_business_hours=enforce_business_hours,
        )
        if not result.valid:
            logger.debug(f"Move of reservation {reservation.id} rejected: {result.code}")
            return result

        quota = self.has_quota(user, target_facility, new_start, reservations)
        if not quota.has_quota:
            return ValidationResult.fail(QUOTA_EXCEEDED, "Booking quota exceeded")

        return ValidationResult.ok()


default_validator = BookingValidator()


def validate_new_booking(facility, start, end, reservations, **kwargs) -> ValidationResult:
    return default_validator.validate_new_booking(facility, start, end, reservations, **kwargs)


def validate_booking_move(
    reservation, target_facility, new_start, new_end, reservations, **kwargs
) -> ValidationResult:
    return default_validator.validate_booking_move(
        reservation, target_facility, new_start, new_end, reservations, **kwargs
    )

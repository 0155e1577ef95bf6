"""
Reservation conflict detection.

Finds the existing reservations on a facility whose intervals overlap a
candidate interval. Intervals are half-open, so back-to-back bookings never
conflict, and every instant is truncated to whole minutes before comparison
so that client-computed and stored times agree on which minute they denote.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)

# Statuses that no longer occupy the facility
NON_OCCUPYING_STATUSES = frozenset({"cancelled", "rejected"})


def round_to_minute(value: datetime) -> datetime:
    """Truncate seconds and finer to zero."""
    return value.replace(second=0, microsecond=0)


def occupies_facility(reservation: Any) -> bool:
    """Whether a reservation still holds its slot."""
    return getattr(reservation, "status", None) not in NON_OCCUPYING_STATUSES


class TimeRange:
    """Represents a half-open [start, end) interval."""

    def __init__(self, start: datetime, end: datetime):
        self.start = start
        self.end = end

    def __str__(self) -> str:
        return f"{self.start.strftime('%Y-%m-%d %H:%M')} - {self.end.strftime('%H:%M')}"

    def __repr__(self) -> str:
        return f"TimeRange({self.start!r}, {self.end!r})"

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps another.

        Touching ranges (self.end == other.start) do not overlap.
        """
        return self.start < other.end and self.end > other.start

    def contains_range(self, other: "TimeRange") -> bool:
        """Check if this range fully contains another range."""
        return self.start <= other.start and other.end <= self.end

    def rounded(self) -> "TimeRange":
        """Return a copy truncated to whole minutes."""
        return TimeRange(round_to_minute(self.start), round_to_minute(self.end))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @staticmethod
    def from_reservation(reservation: Any) -> Optional["TimeRange"]:
        """
        Build a range from any object with start_time/end_time attributes.

        Returns:
            The range, or None when either bound is missing
        """
        start = getattr(reservation, "start_time", None)
        end = getattr(reservation, "end_time", None)
        if start is None or end is None:
            return None
        return TimeRange(start, end)


def find_conflicts(
    facility_id: Any,
    start: datetime,
    end: datetime,
    reservations: Iterable[Any],
    exclude_id: Any = None,
) -> List[Any]:
    """
    Find reservations that overlap a candidate interval on a facility.

    Args:
        facility_id: Facility the candidate interval is on
        start: Candidate start instant
        end: Candidate end instant
        reservations: Pool of existing reservations (objects exposing id,
            facility_id, start_time, end_time and status)
        exclude_id: Reservation id to ignore, used when moving a reservation

    Returns:
        The overlapping reservations, in the order they were supplied
    """
    candidate = TimeRange(start, end).rounded()
    conflicts = []

    for reservation in reservations:
        if exclude_id is not None and str(reservation.id) == str(exclude_id):
            continue
        if str(reservation.facility_id) != str(facility_id):
            continue
        if not occupies_facility(reservation):
            continue

        existing = TimeRange.from_reservation(reservation)
        if existing is None:
            continue

        if candidate.overlaps(existing.rounded()):
            conflicts.append(reservation)

    logger.debug(
        f"Found {len(conflicts)} conflicts for facility {facility_id} in {candidate}"
    )
    return conflicts


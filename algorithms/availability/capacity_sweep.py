"""
Peak concurrent occupancy via a sweep line.

Summing the occupant counts of every conflicting reservation over-counts when
those reservations do not overlap each other, and checking pairwise overlap
against the candidate alone under-counts when they do. The sweep measures the
true maximum number of occupants present at any single instant.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityInfo:
    """Result of a sweep over a set of reservations."""

    peak_occupants: int
    remaining_capacity: int
    peak_at: Optional[datetime] = None

    def to_dict(self):
        return {
            "peak_occupants": self.peak_occupants,
            "remaining_capacity": self.remaining_capacity,
            "peak_at": self.peak_at.isoformat() if self.peak_at else None,
        }


def build_events(reservations: Iterable[Any]) -> List[Tuple[datetime, int]]:
    """
    Emit (instant, +count) at each start and (instant, -count) at each end.

    Reservations without occupants or without both bounds emit nothing.
    """
    events = []
    for reservation in reservations:
        count = getattr(reservation, "occupant_count", 0) or 0
        start = getattr(reservation, "start_time", None)
        end = getattr(reservation, "end_time", None)
        if count <= 0 or start is None or end is None:
            continue
        events.append((start, count))
        events.append((end, -count))
    return events


def peak_concurrent_occupants(
    conflicts: Iterable[Any],
    max_capacity: int,
    exclusive_handoff: bool = False,
) -> CapacityInfo:
    """
    Compute the peak number of simultaneous occupants across reservations.

    At equal instants start events are processed before end events, so a
    reservation ending exactly when another begins is counted as momentarily
    sharing the facility. Pass exclusive_handoff=True to process ends first
    instead, treating the boundary instant as a clean hand-off.

    Args:
        conflicts: Reservations exposing start_time, end_time and occupant_count
        max_capacity: Maximum concurrent occupants the facility accepts
        exclusive_handoff: Process end events before start events at ties

    Returns:
        CapacityInfo with the peak and the capacity left at that peak
    """
    events = build_events(conflicts)
    if not events:
        return CapacityInfo(peak_occupants=0, remaining_capacity=max(0, max_capacity))

    if exclusive_handoff:
        events.sort(key=lambda event: (event[0], event[1]))
    else:
        events.sort(key=lambda event: (event[0], -event[1]))

    current = 0
    peak = 0
    peak_at = None
    for instant, delta in events:
        current += delta
        if current > peak:
            peak = current
            peak_at = instant

    logger.debug(f"Sweep over {len(events) // 2} reservations peaked at {peak} ({peak_at})")

    return CapacityInfo(
        peak_occupants=peak,
        remaining_capacity=max(0, max_capacity - peak),
        peak_at=peak_at,
    )

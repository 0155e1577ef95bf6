"""
Facility availability algorithms.

This package contains the pure computations behind facility reservations:
resolving open time blocks, detecting conflicts, measuring concurrent
occupancy and enumerating free slots.

Key components:
- resolve_open_blocks: Turns a weekly pattern plus exceptions into open blocks
- find_conflicts: Overlap detection on half-open, minute-truncated intervals
- peak_concurrent_occupants: Sweep-line peak occupancy
- SlotGenerator: Enumerates free fixed-length slots for a date
"""

from .capacity_sweep import CapacityInfo, peak_concurrent_occupants
from .conflict_detector import TimeRange, find_conflicts, round_to_minute
from .slot_generator import Slot, SlotGenerator, available_slots
from .time_blocks import TimeBlock, is_interval_within_blocks, resolve_open_blocks

__all__ = [
    "CapacityInfo",
    "Slot",
    "SlotGenerator",
    "TimeBlock",
    "TimeRange",
    "available_slots",
    "find_conflicts",
    "is_interval_within_blocks",
    "peak_concurrent_occupants",
    "resolve_open_blocks",
    "round_to_minute",
]

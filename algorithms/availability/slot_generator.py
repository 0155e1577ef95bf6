"""
Free slot enumeration for a facility on one date.

Combines the facility's resolved open blocks with conflict detection to list
every fixed-length slot that could still be booked. Slots never span two
blocks, and a malformed block is logged and skipped rather than failing the
whole day.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Iterable, Iterator, List, Optional

from .conflict_detector import find_conflicts
from .time_blocks import MINUTES_PER_DAY, TimeBlock, resolve_open_blocks

logger = logging.getLogger(__name__)

DEFAULT_SLOT_MINUTES = 30

BlockResolver = Callable[[Any, date], List[TimeBlock]]


def schedule_resolver(facility: Any, target_date: date) -> List[TimeBlock]:
    """Resolve blocks straight from the facility's stored availability pattern."""
    return resolve_open_blocks(getattr(facility, "availability_schedule", None), target_date)


@dataclass(frozen=True)
class Slot:
    """
    A free slot. start and end are UTC instants when the facility has a
    timezone, so end - start is always the real slot length; to_dict renders
    them in the facility's zone.
    """

    start: datetime
    end: datetime
    tzinfo: Any = field(default=None, compare=False)

    def to_dict(self):
        start, end = self.start, self.end
        if self.tzinfo is not None:
            start, end = start.astimezone(self.tzinfo), end.astimezone(self.tzinfo)
        return {"start": start.isoformat(), "end": end.isoformat()}


def _as_instant(value: datetime, tzinfo) -> datetime:
    if tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def block_bounds(block: TimeBlock, target_date: date, tzinfo=None) -> Optional[tuple]:
    """
    Turn a block's wall-clock bounds into instants on target_date.

    Each bound is placed on the local clock first and only then converted to
    UTC, so a block keeps its real length across a DST change. A bound that
    falls in a spring-forward gap resolves with the pre-transition offset,
    which moves it forward by the gap (02:30 becomes 03:30 in Europe/Stockholm).

    Returns:
        (start, end) datetimes, or None if either bound cannot be parsed
    """
    start_minute, end_minute = block.start_minute, block.end_minute
    if start_minute is None or end_minute is None:
        return None

    start = datetime.combine(target_date, time(*divmod(start_minute, 60)), tzinfo=tzinfo)
    if end_minute == MINUTES_PER_DAY:
        end = datetime.combine(target_date + timedelta(days=1), time(0, 0), tzinfo=tzinfo)
    else:
        end = datetime.combine(target_date, time(*divmod(end_minute, 60)), tzinfo=tzinfo)
    return _as_instant(start, tzinfo), _as_instant(end, tzinfo)


class SlotGenerator:
    """
    Enumerates bookable slots for a facility.

    Holds no state between calls: every call to available_slots resolves the
    blocks and scans the reservations afresh.
    """

    def __init__(self, resolver: Optional[BlockResolver] = None):
        self.resolver = resolver or schedule_resolver

    def available_slots(
        self,
        facility: Any,
        target_date: date,
        reservations: Iterable[Any],
        slot_duration: int = DEFAULT_SLOT_MINUTES,
    ) -> Iterator[Slot]:
        """
        Yield the free slots of slot_duration minutes on target_date.

        Args:
            facility: Facility exposing id, availability_schedule and tzinfo
            target_date: Date to list slots for
            reservations: Existing reservations to avoid
            slot_duration: Slot length in minutes, must be positive

        Yields:
            Slot instances in chronological order
        """
        if slot_duration <= 0:
            raise ValueError("slot_duration must be a positive number of minutes")

        reservations = list(reservations)
        tzinfo = getattr(facility, "tzinfo", None)
        step = timedelta(minutes=slot_duration)

        for block in self.resolver(facility, target_date):
            bounds = block_bounds(block, target_date, tzinfo)
            if bounds is None:
                logger.error(
                    f"Invalid time format in block {block} for facility {facility.id}; skipping"
                )
                continue

            # Stepping on UTC instants keeps every slot exactly slot_duration long
            block_start, block_end = bounds
            slot_start = block_start
            while slot_start + step <= block_end:
                slot_end = slot_start + step
                if not find_conflicts(facility.id, slot_start, slot_end, reservations):
                    yield Slot(start=slot_start, end=slot_end, tzinfo=tzinfo)
                slot_start = slot_end


def available_slots(
    facility: Any,
    target_date: date,
    reservations: Iterable[Any],
    slot_duration: int = DEFAULT_SLOT_MINUTES,
    resolver: Optional[BlockResolver] = None,
) -> List[Slot]:
    """List every free slot for a facility on a date."""
    generator = SlotGenerator(resolver)
    return list(generator.available_slots(facility, target_date, reservations, slot_duration))

"""
TimeBlock resolution for facility availability patterns.

A facility stores a recurring weekly pattern plus date-specific exceptions.
This module turns that pattern into the concrete list of open wall-clock
windows for one calendar date, and answers whether a clock range fits
inside one of them.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
END_OF_DAY = "24:00"
MINUTES_PER_DAY = 24 * 60

WEEKDAY_KEYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

EXCEPTION_CLOSED = "closed"
EXCEPTION_MODIFIED = "modified"
EXCEPTION_TYPES = (EXCEPTION_CLOSED, EXCEPTION_MODIFIED)

DEFAULT_OPEN = "08:00"
DEFAULT_CLOSE = "20:00"
MAX_SCHEDULE_EXCEPTIONS = 365


@dataclass(frozen=True)
class TimeBlock:
    """An open window on a single date, as "HH:MM" wall-clock strings."""

    from_time: str
    to_time: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeBlock":
        return cls(from_time=str(data.get("from", "")), to_time=str(data.get("to", "")))

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.from_time, "to": self.to_time}

    @property
    def start_minute(self) -> Optional[int]:
        return parse_clock(self.from_time)

    @property
    def end_minute(self) -> Optional[int]:
        return parse_clock(self.to_time, allow_end_of_day=True)

    def is_parsable(self) -> bool:
        return self.start_minute is not None and self.end_minute is not None

    def __str__(self) -> str:
        return f"{self.from_time}-{self.to_time}"


def parse_clock(value: Any, allow_end_of_day: bool = False) -> Optional[int]:
    """
    Parse an "HH:MM" string into minutes since midnight.

    Args:
        value: The clock string
        allow_end_of_day: Accept "24:00" (end of the day) as 1440

    Returns:
        Minutes since midnight, or None if the value is not a valid clock time
    """
    if not isinstance(value, str):
        return None
    if allow_end_of_day and value == END_OF_DAY:
        return MINUTES_PER_DAY
    match = CLOCK_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def format_clock(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM" ("24:00" for end of day)."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def default_schedule() -> Dict[str, Any]:
    """Every day open 08:00-20:00, no exceptions."""
    return {
        "weekly_schedule": {
            "default_time_blocks": [{"from": DEFAULT_OPEN, "to": DEFAULT_CLOSE}],
            "days": {},
        },
        "exceptions": [],
    }


def _blocks_from(raw_blocks: Optional[Iterable[Dict[str, Any]]]) -> List[TimeBlock]:
    return [TimeBlock.from_dict(block) for block in raw_blocks or []]


def _sort_key(block: TimeBlock):
    start = block.start_minute
    # Unparsable blocks sort last and are left for consumers to report
    return (start is None, start or 0, block.from_time)


def resolve_open_blocks(pattern: Optional[Dict[str, Any]], target_date: date) -> List[TimeBlock]:
    """
    Resolve an availability pattern into the open blocks for one date.

    A date-specific exception takes precedence over the weekly pattern. A
    "closed" exception or an unavailable weekday yields no blocks; a weekday
    without its own blocks falls back to the pattern's default blocks.

    Args:
        pattern: Availability pattern (see default_schedule for the shape);
            None means the default schedule
        target_date: The calendar date to resolve

    Returns:
        Blocks sorted ascending by opening time
    """
    if isinstance(target_date, datetime):
        target_date = target_date.date()
    pattern = pattern or default_schedule()
    date_key = target_date.isoformat()

    for exception in pattern.get("exceptions") or []:
        if exception.get("date") != date_key:
            continue
        if exception.get("type") == EXCEPTION_CLOSED:
            return []
        return sorted(_blocks_from(exception.get("time_blocks")), key=_sort_key)

    weekly = pattern.get("weekly_schedule") or {}
    day = (weekly.get("days") or {}).get(WEEKDAY_KEYS[target_date.weekday()])

    if day is not None:
        if not day.get("available", True):
            return []
        if day.get("time_blocks"):
            return sorted(_blocks_from(day["time_blocks"]), key=_sort_key)

    return sorted(_blocks_from(weekly.get("default_time_blocks")), key=_sort_key)


def is_interval_within_blocks(blocks: Iterable[TimeBlock], start_clock: str, end_clock: str) -> bool:
    """
    Check whether a clock range fits entirely inside a single block.

    Args:
        blocks: Resolved blocks for the date
        start_clock: Interval start, "HH:MM"
        end_clock: Interval end, "HH:MM" or "24:00"

    Returns:
        True if some block contains [start_clock, end_clock)
    """
    start = parse_clock(start_clock)
    end = parse_clock(end_clock, allow_end_of_day=True)
    if start is None or end is None or start >= end:
        return False

    for block in blocks:
        block_start, block_end = block.start_minute, block.end_minute
        if block_start is None or block_end is None:
            continue
        if block_start <= start and end <= block_end:
            return True
    return False


def validate_time_blocks(raw_blocks: Any) -> List[str]:
    """
    Validate a list of raw {"from", "to"} blocks.

    Returns:
        Human-readable problems; empty when the blocks are valid
    """
    if not isinstance(raw_blocks, list):
        return ["time_blocks must be a list"]

    errors = []
    parsed = []
    for index, raw in enumerate(raw_blocks):
        if not isinstance(raw, dict):
            errors.append(f"Block {index + 1}: must be an object with 'from' and 'to'")
            continue
        start = parse_clock(raw.get("from"))
        end = parse_clock(raw.get("to"), allow_end_of_day=True)
        if start is None or end is None:
            errors.append(f"Block {index + 1}: times must use HH:MM format")
            continue
        if start >= end:
            errors.append(f"Block {index + 1}: start time must be before end time")
            continue
        parsed.append((start, end, index))

    parsed.sort()
    for (_, prev_end, prev_index), (start, _, index) in zip(parsed, parsed[1:]):
        if start < prev_end:
            errors.append(f"Block {index + 1} overlaps block {prev_index + 1}")

    return errors


def validate_schedule(pattern: Any) -> List[str]:
    """
    Validate a full availability pattern before it is stored.

    Returns:
        Human-readable problems; empty when the pattern is valid
    """
    if not isinstance(pattern, dict):
        return ["availability_schedule must be an object"]

    errors = []
    weekly = pattern.get("weekly_schedule")
    if not isinstance(weekly, dict):
        errors.append("weekly_schedule is required")
    else:
        errors.extend(
            f"default_time_blocks: {error}"
            for error in validate_time_blocks(weekly.get("default_time_blocks", []))
        )
        days = weekly.get("days") or {}
        if not isinstance(days, dict):
            errors.append("days must be an object keyed by weekday")
            days = {}
        for day_key, day in days.items():
            if day_key not in WEEKDAY_KEYS:
                errors.append(f"Unknown weekday: {day_key}")
                continue
            if not isinstance(day, dict):
                errors.append(f"{day_key}: must be an object")
                continue
            if day.get("time_blocks"):
                errors.extend(
                    f"{day_key}: {error}" for error in validate_time_blocks(day["time_blocks"])
                )

    exceptions = pattern.get("exceptions", [])
    if not isinstance(exceptions, list):
        return errors + ["exceptions must be a list"]
    if len(exceptions) > MAX_SCHEDULE_EXCEPTIONS:
        errors.append(f"Maximum of {MAX_SCHEDULE_EXCEPTIONS} exceptions allowed")

    seen_dates = set()
    for exception in exceptions:
        errors.extend(validate_exception(exception))
        exception_date = exception.get("date") if isinstance(exception, dict) else None
        if exception_date in seen_dates:
            errors.append(f"Duplicate exception for {exception_date}")
        seen_dates.add(exception_date)

    return errors


def validate_exception(exception: Any) -> List[str]:
    """Validate a single date-specific exception entry."""
    if not isinstance(exception, dict):
        return ["Exception must be an object"]

    errors = []
    exception_date = exception.get("date")
    try:
        date.fromisoformat(exception_date)
    except (TypeError, ValueError):
        errors.append(f"Invalid exception date: {exception_date!r}. Expected YYYY-MM-DD.")

    exception_type = exception.get("type")
    if exception_type not in EXCEPTION_TYPES:
        errors.append("Invalid exception type. Must be 'closed' or 'modified'.")
    elif exception_type == EXCEPTION_MODIFIED:
        blocks = exception.get("time_blocks")
        if not blocks:
            errors.append("Modified exceptions require at least one time block")
        else:
            errors.extend(validate_time_blocks(blocks))

    reason = exception.get("reason")
    if reason and len(str(reason)) > 500:
        errors.append("Reason must be 500 characters or fewer")

    return errors

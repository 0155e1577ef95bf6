# tests/algorithms/test_time_blocks.py
from datetime import date

from django.test import SimpleTestCase

from algorithms.availability.time_blocks import (
    TimeBlock,
    default_schedule,
    format_clock,
    is_interval_within_blocks,
    parse_clock,
    resolve_open_blocks,
    validate_schedule,
    validate_time_blocks,
)

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
SUNDAY = date(2026, 3, 8)


def blocks(*pairs):
    return [{"from": start, "to": end} for start, end in pairs]


def pattern(days=None, exceptions=None, default=(("08:00", "20:00"),)):
    return {
        "weekly_schedule": {"default_time_blocks": blocks(*default), "days": days or {}},
        "exceptions": exceptions or [],
    }


class ParseClockTest(SimpleTestCase):
    def test_valid_times(self):
        self.assertEqual(parse_clock("00:00"), 0)
        self.assertEqual(parse_clock("08:30"), 510)
        self.assertEqual(parse_clock("23:59"), 1439)

    def test_invalid_times(self):
        for value in ("7:00", "24:01", "12:60", "noon", "", None, 800):
            self.assertIsNone(parse_clock(value), value)

    def test_end_of_day_only_when_allowed(self):
        self.assertIsNone(parse_clock("24:00"))
        self.assertEqual(parse_clock("24:00", allow_end_of_day=True), 1440)

    def test_format_clock(self):
        self.assertEqual(format_clock(510), "08:30")
        self.assertEqual(format_clock(1440), "24:00")


class ResolveOpenBlocksTest(SimpleTestCase):
    """Test cases for turning a weekly pattern into the blocks of one date"""

    def test_missing_pattern_uses_default_schedule(self):
        self.assertEqual(resolve_open_blocks(None, MONDAY), [TimeBlock("08:00", "20:00")])
        self.assertEqual(resolve_open_blocks(default_schedule(), SUNDAY), [TimeBlock("08:00", "20:00")])

    def test_weekday_without_blocks_falls_back_to_default(self):
        schedule = pattern(days={"monday": {"available": True, "time_blocks": []}})

        self.assertEqual(resolve_open_blocks(schedule, MONDAY), [TimeBlock("08:00", "20:00")])

    def test_weekday_blocks_are_sorted(self):
        schedule = pattern(
            days={"monday": {"available": True, "time_blocks": blocks(("14:00", "18:00"), ("07:00", "12:00"))}}
        )

        self.assertEqual(
            resolve_open_blocks(schedule, MONDAY),
            [TimeBlock("07:00", "12:00"), TimeBlock("14:00", "18:00")],
        )
        self.assertEqual(resolve_open_blocks(schedule, TUESDAY), [TimeBlock("08:00", "20:00")])

    def test_unavailable_weekday_is_closed(self):
        schedule = pattern(days={"sunday": {"available": False}})

        self.assertEqual(resolve_open_blocks(schedule, SUNDAY), [])

    def test_closed_exception_wins(self):
        schedule = pattern(exceptions=[{"date": "2026-03-02", "type": "closed", "reason": "Show"}])

        self.assertEqual(resolve_open_blocks(schedule, MONDAY), [])
        self.assertEqual(resolve_open_blocks(schedule, TUESDAY), [TimeBlock("08:00", "20:00")])

    def test_modified_exception_overrides_unavailable_weekday(self):
        schedule = pattern(
            days={"sunday": {"available": False}},
            exceptions=[
                {"date": "2026-03-08", "type": "modified", "time_blocks": blocks(("10:00", "14:00"))}
            ],
        )

        self.assertEqual(resolve_open_blocks(schedule, SUNDAY), [TimeBlock("10:00", "14:00")])

    def test_unparsable_blocks_sort_last(self):
        schedule = pattern(default=(("bad", "12:00"), ("13:00", "15:00")))

        resolved = resolve_open_blocks(schedule, MONDAY)

        self.assertEqual(resolved[0], TimeBlock("13:00", "15:00"))
        self.assertFalse(resolved[1].is_parsable())


class IntervalWithinBlocksTest(SimpleTestCase):
    def setUp(self):
        self.blocks = [TimeBlock("08:00", "12:00"), TimeBlock("13:00", "24:00")]

    def test_inside_one_block(self):
        self.assertTrue(is_interval_within_blocks(self.blocks, "08:00", "12:00"))
        self.assertTrue(is_interval_within_blocks(self.blocks, "13:30", "24:00"))

    def test_spanning_two_blocks(self):
        self.assertFalse(is_interval_within_blocks(self.blocks, "11:00", "14:00"))

    def test_outside_blocks(self):
        self.assertFalse(is_interval_within_blocks(self.blocks, "07:00", "09:00"))

    def test_empty_or_inverted_interval(self):
        self.assertFalse(is_interval_within_blocks(self.blocks, "10:00", "10:00"))
        self.assertFalse(is_interval_within_blocks(self.blocks, "11:00", "09:00"))

    def test_unparsable_blocks_ignored(self):
        self.assertFalse(is_interval_within_blocks([TimeBlock("x", "y")], "09:00", "10:00"))


class ScheduleValidationTest(SimpleTestCase):
    def test_default_schedule_is_valid(self):
        self.assertEqual(validate_schedule(default_schedule()), [])

    def test_overlapping_blocks(self):
        errors = validate_time_blocks(blocks(("08:00", "12:00"), ("11:00", "13:00")))

        self.assertEqual(len(errors), 1)
        self.assertIn("overlaps", errors[0])

    def test_bad_format_and_order(self):
        errors = validate_time_blocks(blocks(("8:00", "12:00"), ("14:00", "13:00")))

        self.assertEqual(len(errors), 2)

    def test_unknown_weekday(self):
        errors = validate_schedule(pattern(days={"funday": {"available": True}}))

        self.assertIn("Unknown weekday: funday", errors)

    def test_duplicate_exception_dates(self):
        closed = {"date": "2026-03-02", "type": "closed"}

        errors = validate_schedule(pattern(exceptions=[closed, dict(closed)]))

        self.assertIn("Duplicate exception for 2026-03-02", errors)

    def test_modified_exception_requires_blocks(self):
        errors = validate_schedule(pattern(exceptions=[{"date": "2026-03-02", "type": "modified"}]))

        self.assertIn("Modified exceptions require at least one time block", errors)

    def test_exception_limit(self):
        exceptions = [
            {"date": date.fromordinal(MONDAY.toordinal() + offset).isoformat(), "type": "closed"}
            for offset in range(366)
        ]

        errors = validate_schedule(pattern(exceptions=exceptions))

        self.assertIn("Maximum of 365 exceptions allowed", errors)

    def test_not_an_object(self):
        self.assertEqual(validate_schedule([]), ["availability_schedule must be an object"])

# tests/algorithms/test_slot_generator.py
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from algorithms.availability.slot_generator import (
    SlotGenerator,
    available_slots,
    block_bounds,
)
from algorithms.availability.time_blocks import TimeBlock, resolve_open_blocks

STOCKHOLM = ZoneInfo("Europe/Stockholm")
MONDAY = date(2026, 3, 2)


def at(hour, minute=0, day=MONDAY):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=STOCKHOLM)


def make_facility(*pairs):
    return SimpleNamespace(
        id="arena-1",
        tzinfo=STOCKHOLM,
        availability_schedule={
            "weekly_schedule": {
                "default_time_blocks": [{"from": start, "to": end} for start, end in pairs],
                "days": {},
            },
            "exceptions": [],
        },
    )


def booked(start, end, status="confirmed"):
    return SimpleNamespace(
        id=f"{start:%H%M}", facility_id="arena-1", start_time=start, end_time=end, status=status
    )


class SlotGeneratorTest(SimpleTestCase):
    """Test cases for free slot enumeration"""

    def test_empty_block_yields_every_slot(self):
        slots = available_slots(make_facility(("08:00", "10:00")), MONDAY, [], 30)

        self.assertEqual(
            [(slot.start, slot.end) for slot in slots],
            [
                (at(8), at(8, 30)),
                (at(8, 30), at(9)),
                (at(9), at(9, 30)),
                (at(9, 30), at(10)),
            ],
        )

    def test_booked_slot_is_skipped(self):
        slots = available_slots(
            make_facility(("08:00", "10:00")), MONDAY, [booked(at(8, 30), at(9))], 30
        )

        self.assertNotIn(at(8, 30), [slot.start for slot in slots])
        self.assertEqual(len(slots), 3)

    def test_cancelled_reservation_frees_its_slot(self):
        slots = available_slots(
            make_facility(("08:00", "09:00")), MONDAY, [booked(at(8), at(9), status="cancelled")], 60
        )

        self.assertEqual(len(slots), 1)

    def test_slots_do_not_span_blocks(self):
        facility = make_facility(("08:00", "08:45"), ("09:00", "10:00"))

        slots = available_slots(facility, MONDAY, [], 30)

        self.assertEqual([slot.start for slot in slots], [at(8), at(9), at(9, 30)])

    def test_slot_containment_properties(self):
        facility = make_facility(("07:15", "11:00"), ("13:00", "17:40"))
        reservations = [booked(at(8), at(9, 10)), booked(at(14, 5), at(14, 20))]
        blocks = resolve_open_blocks(facility.availability_schedule, MONDAY)

        slots = available_slots(facility, MONDAY, reservations, 45)

        self.assertTrue(slots)
        for slot in slots:
            self.assertEqual(slot.end - slot.start, timedelta(minutes=45))
            self.assertTrue(
                any(
                    block_bounds(block, MONDAY, STOCKHOLM)[0] <= slot.start
                    and slot.end <= block_bounds(block, MONDAY, STOCKHOLM)[1]
                    for block in blocks
                )
            )
            for reservation in reservations:
                self.assertFalse(
                    slot.start < reservation.end_time and slot.end > reservation.start_time
                )

    def test_end_of_day_block(self):
        slots = available_slots(make_facility(("23:00", "24:00")), MONDAY, [], 30)

        self.assertEqual(slots[-1].end, datetime(2026, 3, 3, 0, 0, tzinfo=STOCKHOLM))
        self.assertEqual(len(slots), 2)

    def test_invalid_block_is_logged_and_skipped(self):
        facility = make_facility(("8am", "10:00"), ("12:00", "13:00"))

        with self.assertLogs("algorithms.availability.slot_generator", level="ERROR") as logs:
            slots = available_slots(facility, MONDAY, [], 60)

        self.assertEqual([slot.start for slot in slots], [at(12)])
        self.assertIn("8am-10:00", logs.output[0])

    def test_non_positive_duration_rejected(self):
        with self.assertRaises(ValueError):
            available_slots(make_facility(("08:00", "10:00")), MONDAY, [], 0)

    def test_generator_is_restartable(self):
        generator = SlotGenerator()
        facility = make_facility(("08:00", "10:00"))

        first = list(generator.available_slots(facility, MONDAY, [], 60))
        second = list(generator.available_slots(facility, MONDAY, [], 60))

        self.assertEqual(first, second)

    def test_custom_resolver(self):
        calls = []

        def resolver(facility, target_date):
            calls.append(target_date)
            return [TimeBlock("10:00", "11:00")]

        slots = available_slots(make_facility(("08:00", "20:00")), MONDAY, [], 60, resolver=resolver)

        self.assertEqual(calls, [MONDAY])
        self.assertEqual([(slot.start, slot.end) for slot in slots], [(at(10), at(11))])

    def test_to_dict(self):
        slot = available_slots(make_facility(("08:00", "08:30")), MONDAY, [], 30)[0]

        self.assertEqual(slot.to_dict(), {"start": at(8).isoformat(), "end": at(8, 30).isoformat()})


class DaylightSavingSlotTest(SimpleTestCase):
    """Slots on the days Europe/Stockholm changes its clocks"""

    SPRING_FORWARD = date(2026, 3, 29)
    FALL_BACK = date(2026, 10, 25)

    def local_clock(self, slots):
        return [slot.start.astimezone(STOCKHOLM).strftime("%H:%M%z") for slot in slots]

    def assert_real_length(self, slots, minutes):
        for slot in slots:
            self.assertEqual(
                slot.end.astimezone(timezone.utc) - slot.start.astimezone(timezone.utc),
                timedelta(minutes=minutes),
            )

    def test_spring_forward_skips_missing_hour(self):
        slots = available_slots(make_facility(("01:00", "04:00")), self.SPRING_FORWARD, [], 30)

        self.assertEqual(
            self.local_clock(slots), ["01:00+0100", "01:30+0100", "03:00+0200", "03:30+0200"]
        )
        self.assert_real_length(slots, 30)

    def test_fall_back_lists_repeated_hour_once_per_occurrence(self):
        slots = available_slots(make_facility(("01:00", "04:00")), self.FALL_BACK, [], 30)

        self.assertEqual(
            self.local_clock(slots),
            [
                "01:00+0200",
                "01:30+0200",
                "02:00+0200",
                "02:30+0200",
                "02:00+0100",
                "02:30+0100",
                "03:00+0100",
                "03:30+0100",
            ],
        )
        self.assert_real_length(slots, 30)
        starts = [slot.start.astimezone(timezone.utc) for slot in slots]
        self.assertEqual(starts, sorted(set(starts)))

    def test_reservation_on_transition_day(self):
        reservation = booked(
            datetime(2026, 3, 29, 3, 0, tzinfo=STOCKHOLM), datetime(2026, 3, 29, 3, 30, tzinfo=STOCKHOLM)
        )

        slots = available_slots(make_facility(("01:00", "04:00")), self.SPRING_FORWARD, [reservation], 30)

        self.assertEqual(self.local_clock(slots), ["01:00+0100", "01:30+0100", "03:30+0200"])

    def test_to_dict_uses_local_offset(self):
        slot = available_slots(make_facility(("03:00", "03:30")), self.SPRING_FORWARD, [], 30)[0]

        self.assertEqual(
            slot.to_dict(), {"start": "2026-03-29T03:00:00+02:00", "end": "2026-03-29T03:30:00+02:00"}
        )

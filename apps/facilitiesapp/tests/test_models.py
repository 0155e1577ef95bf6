# apps/facilitiesapp/tests/test_models.py
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase

from algorithms.availability.time_blocks import default_schedule
from apps.facilitiesapp.models import Facility, FacilityReservation, normalize_occupant_count

User = get_user_model()
STOCKHOLM = ZoneInfo("Europe/Stockholm")


class NormalizeOccupantCountTest(SimpleTestCase):
    def test_list_counts_distinct_ids(self):
        self.assertEqual(normalize_occupant_count(horse_ids=["a", "b", "a", "", None]), 2)

    def test_single_id(self):
        self.assertEqual(normalize_occupant_count(horse_id="a"), 1)

    def test_list_wins_over_single_id(self):
        self.assertEqual(normalize_occupant_count(horse_id="a", horse_ids=["b", "c"]), 2)

    def test_absent(self):
        self.assertEqual(normalize_occupant_count(), 0)
        self.assertEqual(normalize_occupant_count(horse_ids=[]), 0)


class FacilityModelTest(TestCase):
    """Test cases for the Facility model"""

    def test_defaults(self):
        facility = Facility.objects.create(stable_id="stable-1", name="Indoor Arena")

        self.assertEqual(facility.availability_schedule, default_schedule())
        self.assertEqual(facility.timezone, "Europe/Stockholm")
        self.assertEqual(facility.max_occupants_per_reservation, 1)
        self.assertFalse(facility.is_shared)
        self.assertEqual(str(facility), "Indoor Arena (Arena)")

    def test_shared_when_capacity_declared(self):
        facility = Facility(stable_id="stable-1", name="Paddock", max_concurrent_occupants=4)

        self.assertTrue(facility.is_shared)

    def test_tzinfo(self):
        facility = Facility(stable_id="stable-1", name="Arena", timezone="Europe/London")

        self.assertEqual(facility.tzinfo, ZoneInfo("Europe/London"))

    def test_clean_rejects_unknown_timezone(self):
        facility = Facility(stable_id="stable-1", name="Arena", timezone="Mars/Olympus")

        with self.assertRaises(ValidationError) as ctx:
            facility.clean()
        self.assertIn("timezone", ctx.exception.message_dict)

    def test_clean_rejects_invalid_schedule(self):
        schedule = default_schedule()
        schedule["weekly_schedule"]["default_time_blocks"] = [{"from": "18:00", "to": "08:00"}]
        facility = Facility(stable_id="stable-1", name="Arena", availability_schedule=schedule)

        with self.assertRaises(ValidationError) as ctx:
            facility.clean()
        self.assertIn("availability_schedule", ctx.exception.message_dict)


class FacilityReservationModelTest(TestCase):
    """Test cases for the FacilityReservation model"""

    def setUp(self):
        self.user = User.objects.create_user(username="rider", password="testpass123")
        self.facility = Facility.objects.create(stable_id="stable-1", name="Arena")
        self.start = datetime(2026, 3, 2, 9, 0, tzinfo=STOCKHOLM)

    def test_occupant_count_follows_horses(self):
        reservation = FacilityReservation.objects.create(
            facility=self.facility,
            user=self.user,
            start_time=self.start,
            end_time=self.start + timedelta(hours=1),
            horse_ids=["h1", "h2"],
        )

        self.assertEqual(reservation.occupant_count, 2)
        self.assertEqual(reservation.status, FacilityReservation.STATUS_PENDING)
        self.assertTrue(reservation.is_active)

    def test_occupant_count_refreshed_on_partial_save(self):
        reservation = FacilityReservation.objects.create(
            facility=self.facility,
            user=self.user,
            start_time=self.start,
            end_time=self.start + timedelta(hours=1),
            horse_ids=["h1"],
        )

        reservation.horse_ids = ["h1", "h2", "h3"]
        reservation.save(update_fields=["horse_ids"])
        reservation.refresh_from_db()

        self.assertEqual(reservation.occupant_count, 3)

    def test_cancelled_is_not_active(self):
        reservation = FacilityReservation(status=FacilityReservation.STATUS_CANCELLED)

        self.assertFalse(reservation.is_active)

    def test_clean_rejects_inverted_interval(self):
        reservation = FacilityReservation(
            facility=self.facility, user=self.user, start_time=self.start, end_time=self.start
        )

        with self.assertRaises(ValidationError):
            reservation.clean()

    def test_database_rejects_inverted_interval(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                FacilityReservation.objects.create(
                    facility=self.facility,
                    user=self.user,
                    start_time=self.start,
                    end_time=self.start - timedelta(minutes=30),
                    horse_ids=["h1"],
                )

import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import algorithms.availability.time_blocks


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Facility",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("stable_id", models.CharField(db_index=True, max_length=64, verbose_name="Stable")),
                ("name", models.CharField(max_length=120, verbose_name="Name")),
                (
                    "facility_type",
                    models.CharField(
                        choices=[
                            ("arena", "Arena"),
                            ("round_pen", "Round Pen"),
                            ("paddock", "Paddock"),
                            ("stall", "Stall"),
                            ("walker", "Horse Walker"),
                            ("treadmill", "Treadmill"),
                            ("wash_bay", "Wash Bay"),
                            ("other", "Other"),
                        ],
                        default="arena",
                        max_length=20,
                        verbose_name="Type",
                    ),
                ),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "min_slot_duration_minutes",
                    models.PositiveIntegerField(
                        blank=True, null=True, verbose_name="Minimum Slot Duration (minutes)"
                    ),
                ),
                (
                    "max_hours_per_reservation",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=5,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0.01)],
                        verbose_name="Maximum Hours per Reservation",
                    ),
                ),
                (
                    "max_concurrent_occupants",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Leave empty for exclusive use: one reservation at a time",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Maximum Concurrent Occupants",
                    ),
                ),
                (
                    "max_occupants_per_reservation",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Maximum Horses per Reservation",
                    ),
                ),
                (
                    "availability_schedule",
                    models.JSONField(
                        blank=True,
                        default=algorithms.availability.time_blocks.default_schedule,
                        verbose_name="Availability Schedule",
                    ),
                ),
                ("timezone", models.CharField(default=settings.TIME_ZONE, max_length=64, verbose_name="Time Zone")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
            ],
            options={
                "verbose_name": "Facility",
                "verbose_name_plural": "Facilities",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["stable_id", "is_active"], name="facility_stable_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FacilityReservation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("start_time", models.DateTimeField(db_index=True, verbose_name="Start Time")),
                ("end_time", models.DateTimeField(db_index=True, verbose_name="End Time")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("horse_ids", models.JSONField(blank=True, default=list, verbose_name="Horses")),
                ("horse_names", models.JSONField(blank=True, default=list, verbose_name="Horse Names")),
                ("occupant_count", models.PositiveIntegerField(default=0, verbose_name="Occupants")),
                ("purpose", models.CharField(blank=True, max_length=200, verbose_name="Purpose")),
                ("notes", models.TextField(blank=True, max_length=500, verbose_name="Notes")),
                ("cancelled_at", models.DateTimeField(blank=True, null=True, verbose_name="Cancelled At")),
                (
                    "cancellation_reason",
                    models.TextField(blank=True, verbose_name="Cancellation Reason"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                (
                    "cancelled_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cancelled_facility_reservations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Cancelled By",
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="facilitiesapp.facility",
                        verbose_name="Facility",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="facility_reservations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Booked By",
                    ),
                ),
            ],
            options={
                "verbose_name": "Facility Reservation",
                "verbose_name_plural": "Facility Reservations",
                "ordering": ["start_time"],
                "indexes": [
                    models.Index(
                        fields=["facility", "start_time", "status"], name="reservation_facility_time_idx"
                    ),
                    models.Index(fields=["user", "start_time"], name="reservation_user_time_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("start_time__lt", models.F("end_time"))),
                        name="facility_reservation_start_before_end",
                    ),
                ],
            },
        ),
    ]

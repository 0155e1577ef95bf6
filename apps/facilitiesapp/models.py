# apps/facilitiesapp/models.py
import uuid
from zoneinfo import ZoneInfo

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils import FieldTracker

from algorithms.availability.time_blocks import default_schedule, validate_schedule


def normalize_occupant_count(horse_id=None, horse_ids=None):
    """
    Reduce the horse-linking fields of a reservation to one occupant count.

    A list wins over a single id; blanks and duplicates are ignored.
    """
    if horse_ids:
        return len({str(h) for h in horse_ids if h})
    if horse_id:
        return 1
    return 0


class Facility(models.Model):
    """A bookable physical resource such as an arena or a wash bay"""

    TYPE_CHOICES = (
        ("arena", _("Arena")),
        ("round_pen", _("Round Pen")),
        ("paddock", _("Paddock")),
        ("stall", _("Stall")),
        ("walker", _("Horse Walker")),
        ("treadmill", _("Treadmill")),
        ("wash_bay", _("Wash Bay")),
        ("other", _("Other")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    stable_id = models.CharField(_("Stable"), max_length=64, db_index=True)
    name = models.CharField(_("Name"), max_length=120)
    facility_type = models.CharField(
        _("Type"), max_length=20, choices=TYPE_CHOICES, default="arena"
    )
    description = models.TextField(_("Description"), blank=True)
    min_slot_duration_minutes = models.PositiveIntegerField(
        _("Minimum Slot Duration (minutes)"), null=True, blank=True
    )
    max_hours_per_reservation = models.DecimalField(
        _("Maximum Hours per Reservation"),
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0.01)],
    )
    max_concurrent_occupants = models.PositiveIntegerField(
        _("Maximum Concurrent Occupants"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Leave empty for exclusive use: one reservation at a time"),
    )
    max_occupants_per_reservation = models.PositiveIntegerField(
        _("Maximum Horses per Reservation"),
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )
    availability_schedule = models.JSONField(
        _("Availability Schedule"), default=default_schedule, blank=True
    )
    timezone = models.CharField(_("Time Zone"), max_length=64, default=settings.TIME_ZONE)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    tracker = FieldTracker(fields=["availability_schedule", "timezone"])

    class Meta:
        verbose_name = _("Facility")
        verbose_name_plural = _("Facilities")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["stable_id", "is_active"], name="facility_stable_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_facility_type_display()})"

    @property
    def tzinfo(self):
        return ZoneInfo(self.timezone)

    @property
    def is_shared(self):
        """Shared facilities admit overlapping reservations up to their capacity"""
        return self.max_concurrent_occupants is not None

    def clean(self):
        try:
            ZoneInfo(self.timezone)
        except (KeyError, ValueError):
            raise ValidationError({"timezone": _("Unknown time zone")})

        errors = validate_schedule(self.availability_schedule or default_schedule())
        if errors:
            raise ValidationError({"availability_schedule": errors})


class FacilityReservation(models.Model):
    """An interval during which a facility is held for one or more horses"""

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = (
        (STATUS_PENDING, _("Pending")),
        (STATUS_CONFIRMED, _("Confirmed")),
        (STATUS_REJECTED, _("Rejected")),
        (STATUS_CANCELLED, _("Cancelled")),
    )

    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    facility = models.ForeignKey(
        Facility,
        on_delete=models.CASCADE,
        related_name="reservations",
        verbose_name=_("Facility"),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="facility_reservations",
        verbose_name=_("Booked By"),
    )
    start_time = models.DateTimeField(_("Start Time"), db_index=True)
    end_time = models.DateTimeField(_("End Time"), db_index=True)
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )
    horse_ids = models.JSONField(_("Horses"), default=list, blank=True)
    horse_names = models.JSONField(_("Horse Names"), default=list, blank=True)
    occupant_count = models.PositiveIntegerField(_("Occupants"), default=0)
    purpose = models.CharField(_("Purpose"), max_length=200, blank=True)
    notes = models.TextField(_("Notes"), max_length=500, blank=True)
    cancelled_at = models.DateTimeField(_("Cancelled At"), null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="cancelled_facility_reservations",
        verbose_name=_("Cancelled By"),
        null=True,
        blank=True,
    )
    cancellation_reason = models.TextField(_("Cancellation Reason"), blank=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Facility Reservation")
        verbose_name_plural = _("Facility Reservations")
        ordering = ["start_time"]
        indexes = [
            models.Index(
                fields=["facility", "start_time", "status"], name="reservation_facility_time_idx"
            ),
            models.Index(fields=["user", "start_time"], name="reservation_user_time_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="facility_reservation_start_before_end",
            ),
        ]

    def __str__(self):
        return f"{self.facility.name} - {self.start_time.strftime('%Y-%m-%d %H:%M')}"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError(_("End time must be after start time"))

    def save(self, *args, **kwargs):
        self.occupant_count = normalize_occupant_count(horse_ids=self.horse_ids)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "horse_ids" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"occupant_count"}
        super().save(*args, **kwargs)

# apps/facilitiesapp/serializers.py
from zoneinfo import ZoneInfo

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from algorithms.availability.time_blocks import (
    EXCEPTION_TYPES,
    MINUTES_PER_DAY,
    validate_schedule,
    validate_time_blocks,
)
from apps.facilitiesapp.models import Facility, FacilityReservation


class FacilitySerializer(serializers.ModelSerializer):
    """Serializer for facilities"""

    facility_type_display = serializers.CharField(
        source="get_facility_type_display", read_only=True
    )
    is_shared = serializers.BooleanField(read_only=True)

    class Meta:
        model = Facility
        fields = [
            "id",
            "stable_id",
            "name",
            "facility_type",
            "facility_type_display",
            "description",
            "min_slot_duration_minutes",
            "max_hours_per_reservation",
            "max_concurrent_occupants",
            "max_occupants_per_reservation",
            "is_shared",
            "availability_schedule",
            "timezone",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_availability_schedule(self, value):
        errors = validate_schedule(value)
        if errors:
            raise serializers.ValidationError(errors)
        return value

    def validate_timezone(self, value):
        try:
            ZoneInfo(value)
        except (KeyError, ValueError):
            raise serializers.ValidationError(_("Unknown time zone"))
        return value


class FacilityReservationSerializer(serializers.ModelSerializer):
    """Read serializer for facility reservations"""

    facility_name = serializers.CharField(source="facility.name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = FacilityReservation
        fields = [
            "id",
            "facility",
            "facility_name",
            "user",
            "start_time",
            "end_time",
            "status",
            "status_display",
            "horse_ids",
            "horse_names",
            "occupant_count",
            "purpose",
            "notes",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class IntervalMixin:
    def validate(self, data):
        start_time = data.get("start_time")
        end_time = data.get("end_time")
        if start_time and end_time and end_time <= start_time:
            raise serializers.ValidationError(_("End time must be after start time"))
        return data


class ReservationCreateSerializer(IntervalMixin, serializers.Serializer):
    """Serializer for creating a reservation"""

    facility = serializers.UUIDField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    horse_ids = serializers.ListField(child=serializers.CharField(max_length=64), min_length=1)
    horse_names = serializers.ListField(
        child=serializers.CharField(max_length=120), required=False, default=list
    )
    purpose = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    admin_override = serializers.BooleanField(required=False, default=False)


class ReservationMoveSerializer(IntervalMixin, serializers.Serializer):
    """Serializer for moving or editing a reservation; every field is optional"""

    facility = serializers.UUIDField(required=False)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)
    horse_ids = serializers.ListField(
        child=serializers.CharField(max_length=64), min_length=1, required=False
    )
    horse_names = serializers.ListField(child=serializers.CharField(max_length=120), required=False)
    purpose = serializers.CharField(max_length=200, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class ReservationValidateSerializer(IntervalMixin, serializers.Serializer):
    """
    Input for the advisory preview.

    With reservation set the preview runs the move path and excludes that
    reservation from the conflict pool.
    """

    facility = serializers.UUIDField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    occupant_count = serializers.IntegerField(min_value=0, required=False)
    reservation = serializers.UUIDField(required=False)


class ConflictCheckSerializer(IntervalMixin, serializers.Serializer):
    facility = serializers.UUIDField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    exclude_id = serializers.UUIDField(required=False)


class ReasonSerializer(serializers.Serializer):
    """Serializer for cancelling or rejecting a reservation"""

    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class ScheduleExceptionSerializer(serializers.Serializer):
    date = serializers.DateField()
    type = serializers.ChoiceField(choices=EXCEPTION_TYPES)
    time_blocks = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["type"] == "modified":
            if not data["time_blocks"]:
                raise serializers.ValidationError(
                    {"time_blocks": _("Modified exceptions require at least one time block")}
                )
            errors = validate_time_blocks(data["time_blocks"])
            if errors:
                raise serializers.ValidationError({"time_blocks": errors})
        return data


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    slot_duration = serializers.IntegerField(
        min_value=1, max_value=MINUTES_PER_DAY, required=False
    )

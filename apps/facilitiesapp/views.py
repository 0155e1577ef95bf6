"""
Facility app views for Stablebook
Handles endpoints related to facilities, their availability and reservations
"""

from datetime import date

from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from algorithms.availability.conflict_detector import find_conflicts
from apps.facilitiesapp.filters import FacilityFilter, FacilityReservationFilter
from apps.facilitiesapp.models import Facility, FacilityReservation
from apps.facilitiesapp.permissions import FacilityPermission, FacilityReservationPermission
from apps.facilitiesapp.serializers import (
    ConflictCheckSerializer,
    DateQuerySerializer,
    FacilityReservationSerializer,
    FacilitySerializer,
    ReasonSerializer,
    ReservationCreateSerializer,
    ReservationMoveSerializer,
    ReservationValidateSerializer,
    ScheduleExceptionSerializer,
)
from apps.facilitiesapp.services.facility_service import FacilityService
from apps.facilitiesapp.services.reservation_service import ReservationService
from core.exceptions import InvalidDataException, ResourceNotFoundException

date_param = openapi.Parameter(
    "date", openapi.IN_QUERY, description="Date (YYYY-MM-DD)", type=openapi.TYPE_STRING, required=True
)
slot_duration_param = openapi.Parameter(
    "slot_duration", openapi.IN_QUERY, description="Slot length in minutes", type=openapi.TYPE_INTEGER
)


def get_facility_or_404(facility_id) -> Facility:
    try:
        return Facility.objects.get(id=facility_id)
    except (Facility.DoesNotExist, ValueError):
        raise ResourceNotFoundException(f"Facility {facility_id} not found")


class FacilityViewSet(viewsets.ModelViewSet):
    """
    API endpoint for facilities.

    Provides CRUD operations for facilities with additional actions for:
    - Resolved open time blocks for a date
    - Free slots for a date
    - Adding and removing date-specific schedule exceptions
    """

    queryset = Facility.objects.all()
    serializer_class = FacilitySerializer
    permission_classes = [permissions.IsAuthenticated, FacilityPermission]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = FacilityFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "facility_type", "created_at"]
    ordering = ["name"]

    def _date_query(self, request):
        serializer = DateQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @swagger_auto_schema(
        operation_summary="Open time blocks for a date",
        manual_parameters=[date_param],
        tags=["Facilities"],
    )
    @action(detail=True, methods=["get"], url_path="time-blocks")
    def time_blocks(self, request, pk=None):
        facility = self.get_object()
        target_date = self._date_query(request)["date"]
        blocks = FacilityService.get_time_blocks(facility, target_date)
        return Response(
            {
                "date": target_date.isoformat(),
                "time_blocks": [block.to_dict() for block in blocks],
            }
        )

    @swagger_auto_schema(
        operation_summary="Free slots for a date",
        manual_parameters=[date_param, slot_duration_param],
        tags=["Facilities"],
    )
    @action(detail=True, methods=["get"], url_path="available-slots")
    def available_slots(self, request, pk=None):
        facility = self.get_object()
        query = self._date_query(request)
        slot_duration = query.get("slot_duration")
        slots = FacilityService.list_available_slots(facility, query["date"], slot_duration)
        return Response(
            {
                "date": query["date"].isoformat(),
                "slot_duration": slot_duration
                or facility.min_slot_duration_minutes
                or FacilityService.default_slot_minutes(),
                "slots": [slot.to_dict() for slot in slots],
            }
        )

    @swagger_auto_schema(
        operation_summary="Add a schedule exception",
        request_body=ScheduleExceptionSerializer,
        tags=["Facilities"],
    )
    @action(detail=True, methods=["post"])
    def exceptions(self, request, pk=None):
        facility = self.get_object()
        serializer = ScheduleExceptionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entry = FacilityService.add_schedule_exception(
            facility.id,
            data["date"],
            data["type"],
            time_blocks=data.get("time_blocks"),
            reason=data.get("reason", ""),
            user=request.user,
        )
        return Response(entry, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(operation_summary="Remove a schedule exception", tags=["Facilities"])
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"exceptions/(?P<exception_date>\d{4}-\d{2}-\d{2})",
    )
    def remove_exception(self, request, pk=None, exception_date=None):
        facility = self.get_object()
        try:
            parsed = date.fromisoformat(exception_date)
        except ValueError:
            raise InvalidDataException(f"Invalid date: {exception_date}. Expected YYYY-MM-DD.")

        FacilityService.remove_schedule_exception(facility.id, parsed)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FacilityReservationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    API endpoint for facility reservations.

    Writes go through the reservation service, which re-validates inside a
    locked transaction. The validate and check-conflicts actions are
    read-only previews.

    Non-staff users only see their own reservations.
    """

    queryset = FacilityReservation.objects.select_related("facility")
    serializer_class = FacilityReservationSerializer
    permission_classes = [permissions.IsAuthenticated, FacilityReservationPermission]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = FacilityReservationFilter
    ordering_fields = ["start_time", "created_at", "status"]
    ordering = ["start_time"]

    def get_queryset(self):
        """Filter reservations based on user role"""
        queryset = super().get_queryset()
        if self.request.user.is_staff:
            return queryset
        return queryset.filter(user=self.request.user)

    @swagger_auto_schema(
        request_body=ReservationCreateSerializer,
        responses={201: FacilityReservationSerializer, 409: "Booking rejected"},
        tags=["Reservations"],
    )
    def create(self, request, *args, **kwargs):
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        reservation = ReservationService.create_reservation(
            facility_id=data["facility"],
            user=request.user,
            start=data["start_time"],
            end=data["end_time"],
            horse_ids=data["horse_ids"],
            horse_names=data.get("horse_names"),
            purpose=data.get("purpose", ""),
            notes=data.get("notes", ""),
            admin_override=data.get("admin_override", False),
        )
        return Response(self.get_serializer(reservation).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        request_body=ReservationMoveSerializer,
        responses={200: FacilityReservationSerializer, 409: "Booking rejected"},
        tags=["Reservations"],
    )
    def partial_update(self, request, *args, **kwargs):
        reservation = self.get_object()
        serializer = ReservationMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        moved = ReservationService.move_reservation(
            reservation.id,
            request.user,
            facility_id=data.get("facility"),
            start=data.get("start_time"),
            end=data.get("end_time"),
            horse_ids=data.get("horse_ids"),
            horse_names=data.get("horse_names"),
            purpose=data.get("purpose"),
            notes=data.get("notes"),
        )
        return Response(self.get_serializer(moved).data)

    @swagger_auto_schema(request_body=ReasonSerializer, tags=["Reservations"])
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        reservation = self.get_object()
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cancelled = ReservationService.cancel_reservation(
            reservation.id, request.user, reason=serializer.validated_data["reason"]
        )
        return Response(self.get_serializer(cancelled).data)

    @swagger_auto_schema(request_body=None, tags=["Reservations"])
    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        reservation = self.get_object()
        confirmed = ReservationService.confirm_reservation(reservation.id, request.user)
        return Response(self.get_serializer(confirmed).data)

    @swagger_auto_schema(request_body=ReasonSerializer, tags=["Reservations"])
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        reservation = self.get_object()
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        rejected = ReservationService.reject_reservation(
            reservation.id, request.user, reason=serializer.validated_data["reason"]
        )
        return Response(self.get_serializer(rejected).data)

    @swagger_auto_schema(
        operation_summary="Preview whether a reservation would be accepted",
        request_body=ReservationValidateSerializer,
        tags=["Reservations"],
    )
    @action(detail=False, methods=["post"])
    def validate(self, request):
        serializer = ReservationValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        facility = get_facility_or_404(data["facility"])
        start, end = data["start_time"], data["end_time"]
        snapshot = ReservationService.reservation_snapshot(facility, start, end)
        validator = ReservationService.validator

        if data.get("reservation"):
            reservation = self.get_queryset().filter(id=data["reservation"]).first()
            if reservation is None:
                raise ResourceNotFoundException(f"Reservation {data['reservation']} not found")
            result = validator.validate_booking_move(
                reservation,
                facility,
                start,
                end,
                snapshot,
                occupant_count=data.get("occupant_count"),
                user=request.user,
            )
        else:
            result = validator.validate_new_booking(
                facility, start, end, snapshot, occupant_count=data.get("occupant_count", 1)
            )
        return Response(result.to_dict())

    @swagger_auto_schema(
        operation_summary="Count reservations overlapping an interval",
        request_body=ConflictCheckSerializer,
        tags=["Reservations"],
    )
    @action(detail=False, methods=["post"], url_path="check-conflicts")
    def check_conflicts(self, request):
        serializer = ConflictCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        facility = get_facility_or_404(data["facility"])
        snapshot = ReservationService.reservation_snapshot(
            facility, data["start_time"], data["end_time"]
        )
        conflicts = find_conflicts(
            facility.id,
            data["start_time"],
            data["end_time"],
            snapshot,
            exclude_id=data.get("exclude_id"),
        )
        # Counts only; the identities and times of other bookings stay private
        return Response({"has_conflicts": bool(conflicts), "conflict_count": len(conflicts)})

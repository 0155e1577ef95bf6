"""
Reservation Service Module for Stablebook

This module is the authoritative write path for facility reservations. The
booking validator can be called speculatively any number of times; only the
re-check performed here, inside the transaction that holds the facility row
lock, decides whether a reservation is stored.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from apps.facilitiesapp.models import Facility, FacilityReservation, normalize_occupant_count
from apps.facilitiesapp.services.booking_validator import BookingValidator
from core.exceptions import (
    BookingRejectedException,
    InvalidDataException,
    InvalidOperationException,
    PermissionDeniedException,
    ResourceNotFoundException,
)

logger = logging.getLogger(__name__)

# Widen the snapshot query so minute truncation cannot hide a neighbour
SNAPSHOT_MARGIN = timedelta(minutes=1)


class ReservationService:
    """
    Service for creating and changing facility reservations.

    Every method that can add occupancy runs in a transaction, locks the
    facility row, re-reads the active reservations around the window and
    re-applies the booking validator before writing. Concurrent requests for
    the same facility therefore serialize on the lock and the second one sees
    the first one's reservation.
    """

    # Business hours come from the locked facility row, never from the cache
    validator = BookingValidator()

    @staticmethod
    def _lock_facility(facility_id) -> Facility:
        try:
            return Facility.objects.select_for_update().get(id=facility_id)
        except (Facility.DoesNotExist, ValueError):
            raise ResourceNotFoundException(f"Facility {facility_id} not found")

    @staticmethod
    def _get_reservation(reservation_id, lock: bool = False) -> FacilityReservation:
        queryset = FacilityReservation.objects.select_related("facility")
        if lock:
            queryset = FacilityReservation.objects.select_for_update()
        try:
            return queryset.get(id=reservation_id)
        except (FacilityReservation.DoesNotExist, ValueError):
            raise ResourceNotFoundException(f"Reservation {reservation_id} not found")

    @staticmethod
    def reservation_snapshot(facility, start: datetime, end: datetime) -> List[FacilityReservation]:
        """Active reservations on a facility that could touch [start, end)"""
        return list(
            FacilityReservation.objects.filter(
                facility=facility,
                status__in=FacilityReservation.ACTIVE_STATUSES,
                start_time__lt=end + SNAPSHOT_MARGIN,
                end_time__gt=start - SNAPSHOT_MARGIN,
            )
        )

    @staticmethod
    def _check_owner_or_staff(reservation, user):
        if not (user.is_staff or reservation.user_id == user.id):
            raise PermissionDeniedException("You can only change your own reservations")

    @staticmethod
    def _check_staff(user):
        if not user.is_staff:
            raise PermissionDeniedException("Only staff can review reservations")

    @staticmethod
    def _check_interval(start: datetime, end: datetime):
        if start is None or end is None:
            raise InvalidDataException("Start and end time are required")
        if end <= start:
            raise InvalidDataException("End time must be after start time")

    @staticmethod
    def _occupants_for(facility, horse_ids) -> int:
        count = normalize_occupant_count(horse_ids=horse_ids)
        if count < 1:
            raise InvalidDataException("At least one horse must be selected")
        if count > facility.max_occupants_per_reservation:
            raise InvalidDataException(
                f"At most {facility.max_occupants_per_reservation} horse(s) can be booked per reservation"
            )
        return count

    @classmethod
    @transaction.atomic
    def create_reservation(
        cls,
        facility_id,
        user,
        start: datetime,
        end: datetime,
        horse_ids: Optional[list] = None,
        horse_names: Optional[list] = None,
        purpose: str = "",
        notes: str = "",
        admin_override: bool = False,
    ) -> FacilityReservation:
        """
        Create a pending reservation after a locked re-validation.

        Args:
            facility_id: Facility to book
            user: The booking user
            start: Start instant (aware)
            end: End instant (aware)
            horse_ids: Horses occupying the facility
            horse_names: Display names matching horse_ids
            purpose: Short description of the booking
            notes: Free text notes
            admin_override: Skip the business-hours check (staff only)

        Returns:
            The stored reservation

        Raises:
            BookingRejectedException: If the validator rejects the request
            InvalidDataException: If the interval or horse selection is invalid
            PermissionDeniedException: If a non-staff user asks for an override
            ResourceNotFoundException: If the facility does not exist
        """
        if admin_override and not user.is_staff:
            raise PermissionDeniedException("Only staff can override business hours")
        cls._check_interval(start, end)

        facility = cls._lock_facility(facility_id)
        if not facility.is_active:
            raise InvalidOperationException("Facility is not accepting reservations")

        occupant_count = cls._occupants_for(facility, horse_ids)
        snapshot = cls.reservation_snapshot(facility, start, end)

        result = cls.validator.validate_new_booking(
            facility,
            start,
            end,
            snapshot,
            occupant_count=occupant_count,
            enforce_business_hours=not admin_override,
        )
        if not result.valid:
            logger.warning(
                f"Reservation rejected on facility {facility.id} for user {user.id}: {result.code}"
            )
            raise BookingRejectedException(result.error, errors={"code": result.code})

        reservation = FacilityReservation.objects.create(
            facility=facility,
            user=user,
            start_time=start,
            end_time=end,
            status=FacilityReservation.STATUS_PENDING,
            horse_ids=list(horse_ids or []),
            horse_names=list(horse_names or []),
            purpose=purpose or "",
            notes=notes or "",
        )

        logger.info(
            f"Reservation created: ID={reservation.id}, Facility={facility.id}, User={user.id}"
        )
        return reservation

    @classmethod
    @transaction.atomic
    def move_reservation(
        cls,
        reservation_id,
        user,
        facility_id=None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        horse_ids: Optional[list] = None,
        horse_names: Optional[list] = None,
        purpose: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> FacilityReservation:
        """
        Move a reservation to another time or facility, or change its horses.

        Omitted arguments keep their current values. The reservation is
        excluded from its own conflict pool.
        """
        current = cls._get_reservation(reservation_id)
        cls._check_owner_or_staff(current, user)

        target = cls._lock_facility(facility_id or current.facility_id)
        reservation = cls._get_reservation(reservation_id, lock=True)

        if not reservation.is_active:
            raise InvalidOperationException(
                f"Cannot change a {reservation.status} reservation"
            )
        if not target.is_active:
            raise InvalidOperationException("Facility is not accepting reservations")

        new_start = start or reservation.start_time
        new_end = end or reservation.end_time
        cls._check_interval(new_start, new_end)

        new_horse_ids = reservation.horse_ids if horse_ids is None else horse_ids
        occupant_count = cls._occupants_for(target, new_horse_ids)

        snapshot = cls.reservation_snapshot(target, new_start, new_end)
        result = cls.validator.validate_booking_move(
            reservation,
            target,
            new_start,
            new_end,
            snapshot,
            occupant_count=occupant_count,
            user=user,
        )
        if not result.valid:
            logger.warning(
                f"Move of reservation {reservation.id} to facility {target.id} rejected: {result.code}"
            )
            raise BookingRejectedException(result.error, errors={"code": result.code})

        reservation.facility = target
        reservation.start_time = new_start
        reservation.end_time = new_end
        reservation.horse_ids = list(new_horse_ids or [])
        if horse_names is not None:
            reservation.horse_names = list(horse_names)
        if purpose is not None:
            reservation.purpose = purpose
        if notes is not None:
            reservation.notes = notes
        reservation.save()

        logger.info(
            f"Reservation moved: ID={reservation.id}, Facility={target.id}, User={user.id}"
        )
        return reservation

    @classmethod
    @transaction.atomic
    def cancel_reservation(cls, reservation_id, user, reason: str = "") -> FacilityReservation:
        """Cancel a reservation, keeping its interval for history"""
        reservation = cls._get_reservation(reservation_id, lock=True)
        cls._check_owner_or_staff(reservation, user)

        if not reservation.is_active:
            raise InvalidOperationException(
                f"Cannot cancel a {reservation.status} reservation"
            )

        reservation.status = FacilityReservation.STATUS_CANCELLED
        reservation.cancelled_at = timezone.now()
        reservation.cancelled_by = user
        reservation.cancellation_reason = reason or ""
        reservation.save(
            update_fields=[
                "status",
                "cancelled_at",
                "cancelled_by",
                "cancellation_reason",
                "updated_at",
            ]
        )

        logger.info(f"Reservation cancelled: ID={reservation.id}, By={user.id}")
        return reservation

    @classmethod
    @transaction.atomic
    def confirm_reservation(cls, reservation_id, user) -> FacilityReservation:
        """
        Confirm a pending reservation.

        Occupancy is checked again so that a reservation approved late cannot
        push the facility over capacity. Business hours are not re-checked;
        the reservation passed them (or was overridden) when it was made.
        """
        cls._check_staff(user)
        current = cls._get_reservation(reservation_id)

        facility = cls._lock_facility(current.facility_id)
        reservation = cls._get_reservation(reservation_id, lock=True)

        if reservation.status != FacilityReservation.STATUS_PENDING:
            raise InvalidOperationException(
                f"Only pending reservations can be confirmed, this one is {reservation.status}"
            )

        snapshot = cls.reservation_snapshot(facility, reservation.start_time, reservation.end_time)
        result = cls.validator.validate_booking_move(
            reservation,
            facility,
            reservation.start_time,
            reservation.end_time,
            snapshot,
            user=user,
            enforce_business_hours=False,
        )
        if not result.valid:
            logger.warning(f"Confirmation of reservation {reservation.id} rejected: {result.code}")
            raise BookingRejectedException(result.error, errors={"code": result.code})

        reservation.status = FacilityReservation.STATUS_CONFIRMED
        reservation.save(update_fields=["status", "updated_at"])

        logger.info(f"Reservation confirmed: ID={reservation.id}, By={user.id}")
        return reservation

    @classmethod
    @transaction.atomic
    def reject_reservation(cls, reservation_id, user, reason: str = "") -> FacilityReservation:
        """Reject a pending reservation"""
        cls._check_staff(user)
        reservation = cls._get_reservation(reservation_id, lock=True)

        if reservation.status != FacilityReservation.STATUS_PENDING:
            raise InvalidOperationException(
                f"Only pending reservations can be rejected, this one is {reservation.status}"
            )

        reservation.status = FacilityReservation.STATUS_REJECTED
        reservation.cancellation_reason = reason or ""
        reservation.save(update_fields=["status", "cancellation_reason", "updated_at"])

        logger.info(f"Reservation rejected: ID={reservation.id}, By={user.id}")
        return reservation

# apps/facilitiesapp/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.facilitiesapp.models import Facility, FacilityReservation


class FacilityReservationInline(admin.TabularInline):
    """Inline admin for a facility's reservations"""

    model = FacilityReservation
    fk_name = "facility"
    extra = 0
    fields = ["start_time", "end_time", "status", "user", "occupant_count"]
    readonly_fields = ["occupant_count"]
    show_change_link = True


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    """Admin configuration for facilities"""

    list_display = [
        "name",
        "facility_type",
        "stable_id",
        "max_concurrent_occupants",
        "max_hours_per_reservation",
        "is_active",
    ]
    list_filter = ["facility_type", "is_active"]
    search_fields = ["name", "stable_id"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [FacilityReservationInline]


@admin.register(FacilityReservation)
class FacilityReservationAdmin(admin.ModelAdmin):
    """Admin configuration for facility reservations"""

    list_display = [
        "id",
        "facility_name",
        "user",
        "start_time",
        "end_time",
        "status",
        "occupant_count",
    ]
    list_filter = ["status", "facility__facility_type", "start_time"]
    search_fields = ["facility__name", "user__username", "purpose"]
    readonly_fields = ["occupant_count", "cancelled_at", "cancelled_by", "created_at", "updated_at"]
    date_hierarchy = "start_time"

    def facility_name(self, obj):
        """Get facility name for display"""
        return obj.facility.name

    facility_name.short_description = _("Facility")

# apps/facilitiesapp/filters.py
from django.utils import timezone
from django_filters import rest_framework as filters

from apps.facilitiesapp.models import Facility, FacilityReservation


class FacilityFilter(filters.FilterSet):
    stable = filters.CharFilter(field_name="stable_id")
    facility_type = filters.ChoiceFilter(choices=Facility.TYPE_CHOICES)
    name = filters.CharFilter(field_name="name", lookup_expr="icontains")
    is_active = filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Facility
        fields = ["stable", "facility_type", "name", "is_active"]


class FacilityReservationFilter(filters.FilterSet):
    """Filter for facility reservations by facility, owner, status and date"""

    facility = filters.UUIDFilter(field_name="facility__id")
    user = filters.NumberFilter(field_name="user__id")
    status = filters.MultipleChoiceFilter(
        field_name="status", choices=FacilityReservation.STATUS_CHOICES
    )

    # Date filtering
    start_date = filters.DateFilter(field_name="start_time", lookup_expr="date__gte")
    end_date = filters.DateFilter(field_name="start_time", lookup_expr="date__lte")

    upcoming = filters.BooleanFilter(method="filter_upcoming")

    class Meta:
        model = FacilityReservation
        fields = ["facility", "user", "status", "start_date", "end_date", "upcoming"]

    def filter_upcoming(self, queryset, name, value):
        if value:
            return queryset.filter(start_time__gt=timezone.now())
        return queryset

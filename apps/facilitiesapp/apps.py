# apps/facilitiesapp/apps.py
from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class FacilitiesAppConfig(AppConfig):
    name = "apps.facilitiesapp"
    verbose_name = _("Facility Reservations")
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        import apps.facilitiesapp.signals  # noqa: F401

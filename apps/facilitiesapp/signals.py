# apps/facilitiesapp/signals.py
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.facilitiesapp.models import Facility
from apps.facilitiesapp.services.timeblock_cache import timeblock_cache


def invalidate_time_blocks(facility_id):
    """
    Invalidate now and again once the writer's transaction commits.

    Until the commit, concurrent readers still see the old row and may refill
    the cache under the new version; the second bump orphans those entries.
    """
    timeblock_cache.invalidate(facility_id)
    transaction.on_commit(lambda: timeblock_cache.invalidate(facility_id))


@receiver(post_save, sender=Facility)
def facility_post_save(sender, instance, created, **kwargs):
    """
    Handle post-save signal for Facilities.
    Invalidates cached time blocks when the availability pattern changes.
    """
    if created:
        return

    if instance.tracker.has_changed("availability_schedule") or instance.tracker.has_changed(
        "timezone"
    ):
        invalidate_time_blocks(instance.id)


@receiver(post_delete, sender=Facility)
def facility_post_delete(sender, instance, **kwargs):
    invalidate_time_blocks(instance.id)

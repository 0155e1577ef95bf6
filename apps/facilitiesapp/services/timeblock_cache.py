# apps/facilitiesapp/services/timeblock_cache.py
import logging
from datetime import date
from typing import Any, List, Optional

from django.conf import settings
from django.core.cache import cache as default_cache

from algorithms.availability.time_blocks import TimeBlock, resolve_open_blocks
from core.cache.key_generator import generate_cache_key

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "facility_timeblocks"


class TimeBlockCache:
    """
    Caches resolved open blocks per facility and date.

    Entries are keyed by facility, date and a per-facility version number.
    Invalidation bumps the version, so every cached date for the facility is
    orphaned at once and left to expire on its own.

    Instances are callable with (facility, date) and can be passed anywhere a
    block resolver is expected.
    """

    def __init__(self, ttl: Optional[int] = None, backend: Any = None):
        self.ttl = ttl if ttl is not None else getattr(settings, "FACILITY_TIMEBLOCK_CACHE_TTL", 300)
        self.backend = backend or default_cache

    def _version_key(self, facility_id) -> str:
        return generate_cache_key(CACHE_NAMESPACE, facility_id, "version")

    def _version(self, facility_id) -> int:
        version = self.backend.get(self._version_key(facility_id))
        if version is None:
            version = 1
            self.backend.set(self._version_key(facility_id), version, None)
        return version

    def _entry_key(self, facility_id, target_date: date) -> str:
        return generate_cache_key(
            CACHE_NAMESPACE, facility_id, target_date.isoformat(), version=self._version(facility_id)
        )

    def get_blocks(self, facility, target_date: date) -> List[TimeBlock]:
        """
        Resolved blocks for a facility on a date, served from cache when fresh.
        """
        key = self._entry_key(facility.id, target_date)
        cached = self.backend.get(key)
        if cached is not None:
            return [TimeBlock.from_dict(block) for block in cached]

        blocks = resolve_open_blocks(facility.availability_schedule, target_date)
        self.backend.set(key, [block.to_dict() for block in blocks], self.ttl)
        return blocks

    def invalidate(self, facility_id) -> None:
        """Drop every cached date for a facility."""
        key = self._version_key(facility_id)
        try:
            self.backend.incr(key)
        except ValueError:
            # No version stored yet, nothing cached under the implicit v1
            self.backend.set(key, 2, None)
        logger.debug(f"Invalidated time block cache for facility {facility_id}")

    def __call__(self, facility, target_date: date) -> List[TimeBlock]:
        return self.get_blocks(facility, target_date)


timeblock_cache = TimeBlockCache()

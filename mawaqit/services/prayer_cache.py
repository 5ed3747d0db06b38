"""Cached prayer day with a (location, date) staleness key."""

import logging
from dataclasses import replace
from datetime import datetime
from zoneinfo import ZoneInfo

from mawaqit.db.models import Location, PrayerDay
from mawaqit.db.repository import Repository
from mawaqit.engine.prayer_times import compute_day
from mawaqit.engine.qibla import haversine_km
from mawaqit.utils.constants import RECALCULATE_DISTANCE_KM
from mawaqit.utils.time_utils import today_in

logger = logging.getLogger(__name__)


class PrayerTimesCache:
    """Serves the day's prayer times, recomputing only when stale."""

    def __init__(self, repo: Repository, method: str, tz: str, arabic: bool = True):
        self.repo = repo
        self.method = method
        self.tz = tz
        self.arabic = arabic

    def is_stale(self, cached: PrayerDay | None, location: Location, now: datetime) -> bool:
        """Check whether a cached day can still be served.

        Stale when nothing is cached, the calendar date changed, the
        method or timezone changed, or the observer moved more than 1 km.
        """
        if cached is None:
            return True
        if cached.date != today_in(self.tz, now):
            return True
        if cached.method != self.method or cached.timezone != self.tz:
            return True

        moved = haversine_km(cached.latitude, cached.longitude, location.latitude, location.longitude)
        return moved > RECALCULATE_DISTANCE_KM

    async def get_day(self, location: Location, now: datetime | None = None) -> PrayerDay:
        """Today's prayer day for location, flags derived for now."""
        if now is None:
            now = datetime.now(ZoneInfo(self.tz))

        cached = await self.repo.get_prayer_day()
        if not self.is_stale(cached, location, now):
            return _with_passed(cached, now)

        day = compute_day(
            location.latitude,
            location.longitude,
            method=self.method,
            tz=self.tz,
            now=now,
            arabic=self.arabic,
        )

        if day.is_fallback:
            logger.warning("Serving fallback prayer times; not caching them")
        else:
            await self.repo.save_prayer_day(day)
            logger.info(f"Prayer times computed for {day.date} at ({location.latitude}, {location.longitude})")

        return day

    async def invalidate(self) -> None:
        """Drop the cached day (e.g. after a location change)."""
        await self.repo.clear_prayer_day()


def _with_passed(day: PrayerDay, now: datetime) -> PrayerDay:
    events = tuple(replace(e, passed=e.time < now, is_next=False) for e in day.events)
    return replace(day, events=events)

"""Collaborators wired together by the composition root."""

from dataclasses import dataclass, field
from datetime import date, datetime

from mawaqit.db.models import NextPrayer, PrayerDay, ScheduleResult
from mawaqit.db.repository import Repository
from mawaqit.engine.next_prayer import select_next
from mawaqit.engine.scheduler import NotificationScheduler
from mawaqit.services.location import StoredLocationProvider
from mawaqit.services.prayer_cache import PrayerTimesCache
from mawaqit.services.settings import NotificationController, SettingsStore
from mawaqit.services.sinks import NotificationSink


@dataclass
class Services:
    """Everything handlers and background tasks depend on."""

    repo: Repository
    location_provider: StoredLocationProvider
    cache: PrayerTimesCache
    settings_store: SettingsStore
    sink: NotificationSink
    scheduler: NotificationScheduler
    timezone: str
    arabic: bool = True
    controller: NotificationController = field(init=False)
    next_prayer: NextPrayer | None = None
    # Date of the prayer day the pending alerts were last built for
    scheduled_day: date | None = None

    def __post_init__(self) -> None:
        self.controller = NotificationController(self.settings_store, self.scheduler, self.current_day)

    async def current_day(self, now: datetime | None = None) -> PrayerDay | None:
        """Today's prayer day, or None while no location is known."""
        location = await self.location_provider.get_current_location()
        if location is None:
            return None
        return await self.cache.get_day(location, now)

    async def refresh_next_prayer(self, now: datetime | None = None) -> NextPrayer | None:
        """Recompute and remember the next prayer."""
        day = await self.current_day(now)
        self.next_prayer = select_next(day, now) if day is not None else None
        return self.next_prayer

    def note_scheduled(self, day: PrayerDay, result: ScheduleResult | None) -> None:
        """Remember which prayer day the pending alerts were built for."""
        if result is not None and result.state == "done" and not result.skipped:
            self.scheduled_day = day.date

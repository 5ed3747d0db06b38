"""Notification settings state and the orchestration around it."""

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Awaitable, Callable

from mawaqit.db.models import NotificationSettings, PrayerDay, ScheduleResult
from mawaqit.db.repository import Repository

if TYPE_CHECKING:
    from mawaqit.engine.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persisted NotificationSettings.

    Pure state container: updates replace the stored document and never
    trigger scheduling themselves. Writers are serialized so concurrent
    read-modify-write cycles cannot drop each other's fields.
    """

    def __init__(self, repo: Repository):
        self.repo = repo
        self._lock = asyncio.Lock()

    async def get(self) -> NotificationSettings:
        return await self.repo.get_settings()

    async def update(self, **changes) -> tuple[NotificationSettings, NotificationSettings]:
        """Apply a batch of field changes.

        Returns:
            Tuple of (previous, updated) settings

        Raises:
            ValueError: unknown field or invalid value
        """
        unknown = set(changes) - set(NotificationSettings.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        async with self._lock:
            current = await self.get()
            updated = replace(current, **changes)
            await self.repo.save_settings(updated)
        return current, updated

    async def toggle(self, field: str) -> tuple[NotificationSettings, NotificationSettings]:
        """Flip a boolean field under the write lock."""
        async with self._lock:
            current = await self.get()
            value = getattr(current, field)
            if not isinstance(value, bool):
                raise ValueError(f"Setting {field} is not a toggle")
            updated = replace(current, **{field: not value})
            await self.repo.save_settings(updated)
        return current, updated

    async def mark_scheduled(self, day_iso: str) -> None:
        """Record the once-daily scheduling guard."""
        await self.update(last_scheduled_date=day_iso)


class NotificationController:
    """Applies settings changes, then issues exactly one reschedule.

    day_source returns the day's events to schedule (or None when no
    location is known yet).
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        scheduler: "NotificationScheduler",
        day_source: Callable[[], Awaitable[PrayerDay | None]],
    ):
        self.settings_store = settings_store
        self.scheduler = scheduler
        self.day_source = day_source

    async def update_settings(self, **changes) -> ScheduleResult | None:
        """Update settings in one batch and reschedule once if anything changed."""
        previous, updated = await self.settings_store.update(**changes)
        return await self._apply(previous, updated)

    async def toggle(self, field: str) -> ScheduleResult | None:
        """Flip a boolean setting."""
        previous, updated = await self.settings_store.toggle(field)
        return await self._apply(previous, updated)

    async def _apply(
        self, previous: NotificationSettings, updated: NotificationSettings
    ) -> ScheduleResult | None:
        if _policy_fields(previous) == _policy_fields(updated):
            logger.debug("Settings unchanged, no reschedule")
            return None

        day = await self.day_source()
        if day is None:
            logger.info("Settings updated but no prayer times available yet")
            return None

        return await self.scheduler.reschedule(day, settings=updated)


def _policy_fields(settings: NotificationSettings) -> dict:
    """Settings that influence the schedule (the guard date does not)."""
    data = settings.to_dict()
    data.pop("last_scheduled_date", None)
    return data

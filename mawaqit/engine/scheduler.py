"""Prayer notification scheduling.

Each pass moves through idle -> cancelling -> building -> submitting ->
done, or stops at failed when the cancellation itself raises. Passes are
serialized so a pass's cancel always precedes its own build; the last
submitted pass wins.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from mawaqit.db.models import (
    NotificationSettings,
    PrayerDay,
    PrayerName,
    ScheduledNotificationRequest,
    ScheduleResult,
    SchedulingState,
)
from mawaqit.services.settings import SettingsStore
from mawaqit.services.sinks import NotificationSink
from mawaqit.utils.constants import NOTIFICATION_PREFIX
from mawaqit.utils.time_utils import format_minutes, today_in

logger = logging.getLogger(__name__)


def notification_id(name: PrayerName, kind: str) -> str:
    """Stable identifier so rescheduling the same event overwrites it."""
    return f"{NOTIFICATION_PREFIX}{name.value}_{kind}"


def within_window(trigger_at: datetime, now: datetime) -> bool:
    """True if trigger_at lies strictly between now and one year from now."""
    return now < trigger_at < now + relativedelta(years=1)


def build_requests(
    day: PrayerDay,
    settings: NotificationSettings,
    now: datetime,
    arabic: bool = True,
) -> list[ScheduledNotificationRequest]:
    """Build the requests for a day's events.

    Sunrise and passed events are skipped. A "before" request whose
    adjusted time has already passed is dropped, never sent late, and
    anything outside the one-year window is dropped.
    """
    if not settings.enabled:
        return []

    requests = []
    for event in day.events:
        if event.name == PrayerName.SUNRISE:
            continue
        if event.time < now:
            continue

        if settings.notify_at_prayer_time:
            requests.append(
                ScheduledNotificationRequest(
                    trigger_at=event.time,
                    title=f"🕌 وقت {event.display_name}",
                    body=f"حان الآن وقت صلاة {event.display_name}",
                    sound=settings.azan_sound_enabled,
                    identifier=notification_id(event.name, "exact"),
                )
            )

        if settings.notify_before_prayer:
            before = event.time - timedelta(minutes=settings.pre_prayer_minutes)
            if before > now:
                requests.append(
                    ScheduledNotificationRequest(
                        trigger_at=before,
                        title=f"🕌 اقتراب وقت {event.display_name}",
                        body=(
                            f"سيحين وقت صلاة {event.display_name} بعد "
                            f"{format_minutes(settings.pre_prayer_minutes, arabic)}"
                        ),
                        sound=False,
                        identifier=notification_id(event.name, "before"),
                    )
                )

    kept = []
    for request in requests:
        if within_window(request.trigger_at, now):
            kept.append(request)
        else:
            logger.info(
                f"Dropping {request.identifier}: trigger {request.trigger_at.isoformat()} out of window"
            )
    return kept


class NotificationScheduler:
    """Maps a day's prayer events to notification sink requests."""

    def __init__(
        self,
        sink: NotificationSink,
        settings_store: SettingsStore,
        reference_tz: str = "UTC",
        arabic: bool = True,
    ):
        self.sink = sink
        self.settings_store = settings_store
        self.reference_tz = reference_tz
        self.arabic = arabic
        self.state: SchedulingState = "idle"
        self._lock = asyncio.Lock()

    def _transition(self, state: SchedulingState) -> None:
        logger.debug(f"Scheduler: {self.state} -> {state}")
        self.state = state

    async def reschedule(
        self,
        day: PrayerDay,
        settings: NotificationSettings | None = None,
        now: datetime | None = None,
    ) -> ScheduleResult:
        """Cancel everything and rebuild from day (settings change, explicit request)."""
        async with self._lock:
            if settings is None:
                settings = await self.settings_store.get()
            return await self._run_pass(day, settings, now)

    async def schedule_daily(self, day: PrayerDay, now: datetime | None = None) -> ScheduleResult:
        """Once-per-day pass.

        Skips all work when the guard already holds today's date in the
        reference timezone; records it after a completed pass.
        """
        async with self._lock:
            settings = await self.settings_store.get()
            today = today_in(self.reference_tz, now).isoformat()

            if settings.last_scheduled_date == today:
                logger.info(f"Notifications already scheduled for {today}, skipping")
                self._transition("done")
                return ScheduleResult(state="done", skipped=True)

            result = await self._run_pass(day, settings, now)
            if result.state == "done":
                await self.settings_store.mark_scheduled(today)
            return result

    async def _run_pass(
        self,
        day: PrayerDay,
        settings: NotificationSettings,
        now: datetime | None,
    ) -> ScheduleResult:
        if now is None:
            now = datetime.now(ZoneInfo(day.timezone))

        self._transition("cancelling")
        try:
            await self.sink.cancel_all()
        except Exception as e:
            logger.error(f"Failed to cancel existing notifications: {e}", exc_info=True)
            self._transition("failed")
            return ScheduleResult(state="failed")

        self._transition("building")
        requests = build_requests(day, settings, now, self.arabic)

        if not requests:
            logger.info("No prayer notifications to schedule")
            self._transition("done")
            return ScheduleResult(state="done")

        self._transition("submitting")
        outcomes = await asyncio.gather(
            *(self.sink.schedule(request) for request in requests),
            return_exceptions=True,
        )

        result = ScheduleResult(state="done", requested=len(requests))
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                result.failed += 1
                logger.error(f"Failed to schedule {request.identifier}: {outcome}")
            elif outcome:
                result.scheduled += 1
                result.identifiers.append(outcome)
            else:
                logger.info(f"Sink dropped {request.identifier}")

        self._transition("done")
        logger.info(
            f"Successfully scheduled {result.scheduled} out of {result.requested} prayer notifications"
        )
        return result

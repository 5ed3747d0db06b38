"""Background tasks: minute tick and periodic schedule refresh.

Tasks are declared here as plain values and registered once by the
composition root; handlers only touch the injected Services.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable

from mawaqit.db.models import ScheduleResult
from mawaqit.engine.next_prayer import select_next
from mawaqit.services.container import Services

logger = logging.getLogger(__name__)

TaskHandler = Callable[[Services], Awaitable[None]]


@dataclass(frozen=True)
class BackgroundTask:
    """A repeating job: identifier, interval and handler."""

    name: str
    interval: int  # seconds
    first: int  # seconds before the first run
    handler: TaskHandler


async def clock_tick(services: Services, now: datetime | None = None) -> None:
    """Recompute the next prayer; a new prayer day rebuilds the alerts."""
    try:
        day = await services.current_day(now)
        if day is not None and day.date != services.scheduled_day:
            logger.info(f"Prayer day is now {day.date.isoformat()}, rescheduling notifications")
            result = await services.scheduler.reschedule(day, now=now)
            services.note_scheduled(day, result)
        services.next_prayer = select_next(day, now) if day is not None else None
    except Exception as e:
        logger.error(f"Clock tick error: {e}")
        return

    if services.next_prayer:
        next_prayer = services.next_prayer
        logger.debug(f"Next prayer: {next_prayer.event.name.value} at {next_prayer.event.time.isoformat()}")


async def daily_refresh(services: Services, now: datetime | None = None) -> ScheduleResult | None:
    """Once-daily scheduling path; safe to fire several times a day."""
    try:
        day = await services.current_day(now)
        if day is None:
            logger.info("Daily refresh: location unavailable, nothing to schedule")
            return None

        result = await services.scheduler.schedule_daily(day, now)
        services.note_scheduled(day, result)
        return result
    except Exception as e:
        logger.error(f"Daily refresh error: {e}")
        return None


async def startup_recovery(services: Services, now: datetime | None = None) -> ScheduleResult | None:
    """Rebuild the schedule on startup; pending alerts do not survive restarts."""
    try:
        day = await services.current_day(now)
        if day is None:
            logger.info("Startup recovery: no location yet")
            return None

        result = await services.scheduler.reschedule(day, now=now)
        services.note_scheduled(day, result)
        logger.info("Startup recovery complete")
        return result
    except Exception as e:
        logger.error(f"Startup recovery error: {e}")
        return None


def background_tasks(tick_interval: int, refresh_interval: int) -> list[BackgroundTask]:
    """The repeating jobs the application runs."""
    return [
        BackgroundTask("clock_tick", tick_interval, 5, clock_tick),
        BackgroundTask("daily_refresh", refresh_interval, 15, daily_refresh),
    ]

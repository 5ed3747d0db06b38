"""Next-prayer selection with day rollover."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Literal
from zoneinfo import ZoneInfo

from mawaqit.db.models import NextPrayer, PrayerDay, PrayerEvent, PrayerName
from mawaqit.engine.prayer_times import compute_day
from mawaqit.utils.constants import TOMORROW_FAJR_NAME, TOMORROW_PREFIX
from mawaqit.utils.time_utils import format_remaining

logger = logging.getLogger(__name__)

PrayerStatus = Literal["passed", "next", "upcoming"]


def find_next_today(events: tuple[PrayerEvent, ...], now: datetime) -> PrayerEvent | None:
    """Earliest non-sunrise event strictly after now, or None."""
    best: PrayerEvent | None = None
    best_diff: float | None = None

    for event in events:
        if event.name == PrayerName.SUNRISE:
            continue
        diff = (event.time - now).total_seconds()
        if diff > 0 and (best_diff is None or diff < best_diff):
            best, best_diff = event, diff

    return best


def select_next(day: PrayerDay, now: datetime | None = None) -> NextPrayer | None:
    """Pick the upcoming prayer.

    If every prayer of the day has passed, tomorrow is computed with the
    same coordinates, method and timezone, and its Fajr is returned as
    the tomorrow variant.
    """
    if now is None:
        now = datetime.now(ZoneInfo(day.timezone))

    event = find_next_today(day.events, now)
    if event is not None:
        return NextPrayer(event=replace(event, is_next=True, passed=False))

    try:
        tomorrow = compute_day(
            day.latitude,
            day.longitude,
            day.date + timedelta(days=1),
            method=day.method,
            tz=day.timezone,
            now=now,
        )
    except ValueError as e:
        logger.error(f"Error calculating tomorrow's Fajr: {e}")
        return None

    fajr = tomorrow.event(PrayerName.FAJR)
    if fajr is None:
        return None

    return NextPrayer(
        event=replace(
            fajr,
            display_name=TOMORROW_FAJR_NAME,
            display_time=f"{TOMORROW_PREFIX} {fajr.display_time}",
            is_next=True,
        ),
        is_tomorrow=True,
    )


def mark_next(day: PrayerDay, now: datetime, next_prayer: NextPrayer | None = None) -> tuple[PrayerEvent, ...]:
    """Return the day's events with passed/is_next derived for now.

    Exactly one event (today's next prayer) or none (next is tomorrow)
    carries is_next.
    """
    target = None
    if next_prayer is not None and not next_prayer.is_tomorrow:
        target = next_prayer.event.name
    elif next_prayer is None:
        found = find_next_today(day.events, now)
        target = found.name if found else None

    return tuple(
        replace(event, passed=event.time < now, is_next=event.name == target)
        for event in day.events
    )


def remaining(next_prayer: NextPrayer, now: datetime, arabic: bool = True) -> str:
    """Time left until the next prayer, computed at read time."""
    return format_remaining(next_prayer.event.time, now, arabic)


def prayer_status(event: PrayerEvent, now: datetime) -> PrayerStatus:
    """Classify an event relative to now."""
    if event.time < now:
        return "passed"
    if event.is_next:
        return "next"
    return "upcoming"


def should_show_time_until(event: PrayerEvent) -> bool:
    """Countdowns are shown for prayers still ahead, never for sunrise."""
    return not event.passed and event.name != PrayerName.SUNRISE

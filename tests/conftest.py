"""Shared test fixtures."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from mawaqit.db.models import PrayerDay, PrayerEvent, PrayerName

RIYADH = (24.7136, 46.6753)

# Approximate Riyadh times for 2026-03-15
CLOCK = {
    PrayerName.FAJR: (4, 50),
    PrayerName.SUNRISE: (6, 8),
    PrayerName.DHUHR: (12, 9),
    PrayerName.ASR: (15, 33),
    PrayerName.MAGHRIB: (18, 10),
    PrayerName.ISHA: (19, 40),
}


def build_day(day: date = date(2026, 3, 15), tz: str = "Asia/Riyadh", method: str = "Egyptian") -> PrayerDay:
    """Fixed PrayerDay that does not depend on the astronomy library."""
    zone = ZoneInfo(tz)
    events = []
    for name in PrayerName:
        hour, minute = CLOCK[name]
        events.append(
            PrayerEvent(
                name=name,
                display_name=name.display_name,
                time=datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone),
                display_time=f"{hour:02d}:{minute:02d}",
            )
        )
    return PrayerDay(
        latitude=RIYADH[0],
        longitude=RIYADH[1],
        date=day,
        method=method,
        timezone=tz,
        events=tuple(events),
    )


@pytest.fixture
def day() -> PrayerDay:
    return build_day()


@pytest.fixture
def riyadh_now():
    """Factory for times on the fixture date in Riyadh."""

    def make(hour: int, minute: int = 0) -> datetime:
        return datetime(2026, 3, 15, hour, minute, tzinfo=ZoneInfo("Asia/Riyadh"))

    return make


@pytest.fixture
def open_repo(tmp_path):
    """Async factory for a migrated Repository in a temp directory.

    Use inside asyncio.run so the connection lives on one event loop.
    """
    from mawaqit.db.migrations import run_migrations
    from mawaqit.db.repository import Repository

    async def make() -> Repository:
        path = tmp_path / "store" / "mawaqit.db"
        await run_migrations(path)
        repo = Repository(path)
        await repo.connect()
        return repo

    return make


@pytest.fixture
def make_day():
    return build_day

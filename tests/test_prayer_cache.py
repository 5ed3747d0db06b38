"""Tests for the prayer-times cache."""

import asyncio
from dataclasses import replace
from datetime import date

from mawaqit.db.models import Location
from mawaqit.services import prayer_cache
from mawaqit.services.prayer_cache import PrayerTimesCache

RIYADH = Location(24.7136, 46.6753)


def test_is_stale_rules(day, riyadh_now):
    """Stale on missing day, new date, new method or a move over 1 km."""
    cache = PrayerTimesCache(repo=None, method="Egyptian", tz="Asia/Riyadh")
    now = riyadh_now(10, 0)

    assert cache.is_stale(None, RIYADH, now)
    assert not cache.is_stale(day, RIYADH, now)
    # ~0.5 km north
    assert not cache.is_stale(day, Location(24.718, 46.6753), now)
    # ~2 km north
    assert cache.is_stale(day, Location(24.732, 46.6753), now)
    assert cache.is_stale(replace(day, date=date(2026, 3, 14)), RIYADH, now)
    assert cache.is_stale(replace(day, method="UmmAlQura"), RIYADH, now)
    assert cache.is_stale(replace(day, timezone="UTC"), RIYADH, now)


def test_get_day_computes_once(open_repo, make_day, riyadh_now, monkeypatch):
    """Second read on the same day is served from the store."""
    calls = []

    def fake_compute(latitude, longitude, **kwargs):
        calls.append((latitude, longitude))
        return make_day()

    monkeypatch.setattr(prayer_cache, "compute_day", fake_compute)

    async def scenario():
        repo = await open_repo()
        try:
            cache = PrayerTimesCache(repo, "Egyptian", "Asia/Riyadh")
            first = await cache.get_day(RIYADH, riyadh_now(10, 0))
            second = await cache.get_day(RIYADH, riyadh_now(13, 0))
            await cache.invalidate()
            third = await cache.get_day(RIYADH, riyadh_now(13, 0))
            return first, second, third
        finally:
            await repo.close()

    first, second, third = asyncio.run(scenario())

    assert len(calls) == 2
    assert first.date == second.date == third.date
    # Flags are derived for the read time, not stored
    assert [e.passed for e in second.events][:3] == [True, True, True]
    assert not second.events[3].passed


def test_fallback_day_is_not_cached(open_repo, make_day, riyadh_now, monkeypatch):

    def fake_compute(latitude, longitude, **kwargs):
        return replace(make_day(), is_fallback=True)

    monkeypatch.setattr(prayer_cache, "compute_day", fake_compute)

    async def scenario():
        repo = await open_repo()
        try:
            cache = PrayerTimesCache(repo, "Egyptian", "Asia/Riyadh")
            day = await cache.get_day(RIYADH, riyadh_now(10, 0))
            return day, await repo.get_prayer_day()
        finally:
            await repo.close()

    day, stored = asyncio.run(scenario())

    assert day.is_fallback
    assert stored is None

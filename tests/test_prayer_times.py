"""Tests for the astronomical time engine."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from mawaqit.db.models import PrayerName
from mawaqit.engine import prayer_times
from mawaqit.engine.prayer_times import compute_day, parse_day, resolve_method
from mawaqit.utils.exceptions import InvalidCoordinatesError, InvalidDateError, InvalidInputError

RIYADH_TZ = ZoneInfo("Asia/Riyadh")


def test_compute_day_returns_six_ordered_events():
    """Six events in fixed order with strictly increasing times."""
    now = datetime(2026, 3, 15, 0, 30, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now)

    assert [e.name for e in day.events] == list(PrayerName)
    times = [e.time for e in day.events]
    assert all(earlier < later for earlier, later in zip(times, times[1:]))
    assert not day.is_fallback
    assert day.date == date(2026, 3, 15)
    assert all(e.time.date() == date(2026, 3, 15) for e in day.events)


def test_compute_day_plausible_riyadh_times():
    """Dhuhr near local noon, Fajr before sunrise."""
    now = datetime(2026, 3, 15, 0, 30, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, date(2026, 3, 15), tz="Asia/Riyadh", now=now)

    dhuhr = day.event(PrayerName.DHUHR).time
    fajr = day.event(PrayerName.FAJR).time
    assert 11 <= dhuhr.hour <= 12
    assert 4 <= fajr.hour <= 5


def test_compute_day_passed_flags():
    """Passed is derived from the evaluation time."""
    now = datetime(2026, 3, 15, 13, 0, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now)

    passed = {e.name: e.passed for e in day.events}
    assert passed[PrayerName.FAJR]
    assert passed[PrayerName.DHUHR]
    assert not passed[PrayerName.ASR]
    assert not passed[PrayerName.ISHA]


def test_compute_day_arabic_display_time():
    """Display strings use Arabic-Indic digits by default."""
    now = datetime(2026, 3, 15, 0, 30, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now)
    latin = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now, arabic=False)

    assert all(ch in "٠١٢٣٤٥٦٧٨٩:" for ch in day.events[0].display_time)
    assert latin.events[0].display_time == latin.events[0].time.strftime("%H:%M")


def test_compute_day_fallback(monkeypatch):
    """A failing calculation yields the fixed schedule, flagged."""

    def broken(*args, **kwargs):
        raise RuntimeError("no solution at this latitude")

    monkeypatch.setattr(prayer_times, "PrayerTimes", broken)

    now = datetime(2026, 3, 15, 10, 0, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now)

    assert day.is_fallback
    assert [e.name for e in day.events] == list(PrayerName)

    fajr = day.event(PrayerName.FAJR).time
    dhuhr = day.event(PrayerName.DHUHR).time
    # 05:30 already passed at 10:00, rolled to tomorrow
    assert fajr == datetime(2026, 3, 16, 5, 30, tzinfo=RIYADH_TZ)
    assert dhuhr == datetime(2026, 3, 15, 12, 30, tzinfo=RIYADH_TZ)
    assert not any(e.passed for e in day.events)


def test_compute_day_fallback_on_unordered_times(monkeypatch):
    """Out-of-order output from the library is treated as a failure."""

    class Reversed:
        def __init__(self, coordinates, day, method, time_zone):
            base = datetime(day.year, day.month, day.day, 20, 0, tzinfo=time_zone)
            for offset, name in enumerate(["fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha"]):
                setattr(self, name, base - timedelta(hours=offset))

    monkeypatch.setattr(prayer_times, "PrayerTimes", Reversed)

    now = datetime(2026, 3, 15, 0, 30, tzinfo=RIYADH_TZ)
    day = compute_day(24.7136, 46.6753, "2026-03-15", tz="Asia/Riyadh", now=now)

    assert day.is_fallback


@pytest.mark.parametrize(
    "latitude,longitude",
    [(91, 0), (-90.5, 10), (0, 181), (float("nan"), 0), (0, float("inf")), ("north", 0)],
)
def test_compute_day_invalid_coordinates(latitude, longitude):
    """Out-of-range or non-finite coordinates are rejected."""
    with pytest.raises(InvalidCoordinatesError):
        compute_day(latitude, longitude, "2026-03-15")


def test_compute_day_invalid_date():
    """Unparseable dates are rejected, not silently defaulted."""
    with pytest.raises(InvalidDateError):
        compute_day(24.7136, 46.6753, "not-a-date")


def test_input_errors_are_value_errors():
    """Callers can catch input errors as ValueError."""
    assert issubclass(InvalidCoordinatesError, ValueError)
    assert issubclass(InvalidDateError, InvalidInputError)


def test_parse_day_variants():
    """Dates, datetimes, ISO strings and None are accepted."""
    now = datetime(2026, 3, 15, 23, 30, tzinfo=ZoneInfo("UTC"))

    assert parse_day(date(2026, 1, 2), "UTC", now) == date(2026, 1, 2)
    assert parse_day(datetime(2026, 1, 2, 8, 0), "UTC", now) == date(2026, 1, 2)
    assert parse_day("2026-01-02", "UTC", now) == date(2026, 1, 2)
    # 23:30 UTC is already the 16th in Riyadh
    assert parse_day(None, "Asia/Riyadh", now) == date(2026, 3, 16)


def test_resolve_method_unknown_uses_default():
    """Unknown method names fall back to Egyptian."""
    name, _ = resolve_method("NoSuchMethod")
    assert name == "Egyptian"

    name, _ = resolve_method("UmmAlQura")
    assert name == "UmmAlQura"

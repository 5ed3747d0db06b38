"""Time, date and display-string utilities."""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from hijridate import Gregorian

from mawaqit.utils.constants import (
    ARABIC_DIGITS,
    GREGORIAN_MONTHS,
    HIJRI_MONTHS,
    HOURS_WORD,
    MINUTES_PLURAL_WORD,
    MINUTES_WORD,
    NOW_TEXT,
    WEEKDAYS,
)


@dataclass
class HijriDate:
    """Islamic calendar date."""

    year: int
    month: int
    day: int

    @property
    def month_name(self) -> str:
        return HIJRI_MONTHS[self.month - 1]

    @property
    def iso(self) -> str:
        return f"{self.year}-{self.month:02d}-{self.day:02d}"

    @property
    def full(self) -> str:
        return f"{self.day} {self.month_name} {self.year}"


def to_utc(dt: datetime, tz: str) -> datetime:
    """Convert a datetime to UTC, treating naive values as local to tz."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(ZoneInfo("UTC"))


def from_utc(dt: datetime, tz: str) -> datetime:
    """Convert a UTC datetime to the given timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo(tz))


def now_in(tz: str) -> datetime:
    """Current time in the given timezone."""
    return datetime.now(ZoneInfo(tz))


def today_in(tz: str, now: datetime | None = None) -> date:
    """Calendar date of `now` (default: current time) in the given timezone."""
    if now is None:
        return now_in(tz).date()
    return from_utc(now, tz).date()


def to_arabic_numerals(text: str) -> str:
    """Replace ASCII digits with Arabic-Indic digits."""
    return "".join(ARABIC_DIGITS[int(ch)] if ch.isdigit() and ch.isascii() else ch for ch in text)


def format_clock(dt: datetime, arabic: bool = True) -> str:
    """Format a time of day as HH:MM.

    Examples:
        05:07 -> "٠٥:٠٧"
        05:07 (arabic=False) -> "05:07"
    """
    text = dt.strftime("%H:%M")
    return to_arabic_numerals(text) if arabic else text


def format_remaining(target: datetime, now: datetime, arabic: bool = True) -> str:
    """Format the time left until target.

    Examples:
        in the past -> "الآن"
        2h 5m -> "٢ ساعة ٥ دقيقة"
        45m -> "٤٥ دقيقة"
    """
    seconds = (target - now).total_seconds()
    if seconds <= 0:
        return NOW_TEXT

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    convert = to_arabic_numerals if arabic else str

    if hours > 0:
        return f"{convert(str(hours))} {HOURS_WORD} {convert(str(minutes))} {MINUTES_WORD}"
    return f"{convert(str(minutes))} {MINUTES_WORD}"


def format_minutes(minutes: int, arabic: bool = True) -> str:
    """Format a lead time for notification text, e.g. "٥ دقائق"."""
    value = to_arabic_numerals(str(minutes)) if arabic else str(minutes)
    return f"{value} {MINUTES_PLURAL_WORD}"


def to_hijri(day: date) -> HijriDate:
    """Convert a Gregorian date to the Umm al-Qura Hijri date.

    Raises:
        OverflowError: date outside the supported range (1924-2077)
    """
    hijri = Gregorian(day.year, day.month, day.day).to_hijri()
    return HijriDate(year=hijri.year, month=hijri.month, day=hijri.day)


def format_gregorian(day: date) -> str:
    """Arabic full Gregorian date, e.g. "الاثنين، 19 أكتوبر 2026"."""
    return f"{WEEKDAYS[day.weekday()]}، {day.day} {GREGORIAN_MONTHS[day.month - 1]} {day.year}"

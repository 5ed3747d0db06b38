"""Astronomical prayer-time computation."""

import logging
import math
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from adhanpy.PrayerTimes import PrayerTimes
from adhanpy.calculation import CalculationMethod
from dateutil.parser import isoparse

from mawaqit.db.models import PrayerDay, PrayerEvent, PrayerName
from mawaqit.utils.constants import (
    CALCULATION_METHODS,
    DEFAULT_CALCULATION_METHOD,
    FALLBACK_SCHEDULE,
)
from mawaqit.utils.exceptions import InvalidCoordinatesError, InvalidDateError
from mawaqit.utils.time_utils import format_clock, today_in

logger = logging.getLogger(__name__)


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Raise InvalidCoordinatesError unless both values are finite and in range."""
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError) as e:
        raise InvalidCoordinatesError(f"Coordinates must be numbers: {latitude}, {longitude}") from e

    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCoordinatesError(f"Coordinates must be finite: {latitude}, {longitude}")
    if not -90 <= lat <= 90:
        raise InvalidCoordinatesError(f"Latitude out of range [-90, 90]: {lat}")
    if not -180 <= lng <= 180:
        raise InvalidCoordinatesError(f"Longitude out of range [-180, 180]: {lng}")


def parse_day(value: date | datetime | str | None, tz: str, now: datetime | None = None) -> date:
    """Normalize a calendar date argument.

    None means today in tz; datetimes are converted to tz first.
    """
    if value is None:
        return today_in(tz, now)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(ZoneInfo(tz)).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value.strip()).date()
        except (ValueError, OverflowError) as e:
            raise InvalidDateError(f"Unparseable date: {value!r}") from e
    raise InvalidDateError(f"Unsupported date value: {value!r}")


def resolve_method(method: str | None) -> tuple[str, CalculationMethod]:
    """Map a method name to an adhanpy CalculationMethod.

    Unknown names fall back to the default method.
    """
    name = method if method in CALCULATION_METHODS else DEFAULT_CALCULATION_METHOD
    if name != method:
        logger.warning(f"Unknown calculation method {method!r}, using {name}")

    try:
        return name, CalculationMethod[CALCULATION_METHODS[name]]
    except KeyError:
        logger.warning(f"Calculation method {name} not available, using {DEFAULT_CALCULATION_METHOD}")
        default = CALCULATION_METHODS[DEFAULT_CALCULATION_METHOD]
        return DEFAULT_CALCULATION_METHOD, CalculationMethod[default]


def build_event(name: PrayerName, moment: datetime, now: datetime, arabic: bool = True) -> PrayerEvent:
    """Create an event with its display string and passed flag."""
    return PrayerEvent(
        name=name,
        display_name=name.display_name,
        time=moment,
        display_time=format_clock(moment, arabic),
        passed=moment < now,
    )


def compute_day(
    latitude: float,
    longitude: float,
    day: date | datetime | str | None = None,
    method: str | None = DEFAULT_CALCULATION_METHOD,
    tz: str = "UTC",
    now: datetime | None = None,
    arabic: bool = True,
) -> PrayerDay:
    """Compute the six prayer events for a date at a location.

    Args:
        latitude: Observer latitude in degrees [-90, 90]
        longitude: Observer longitude in degrees [-180, 180]
        day: Calendar date (default: today in tz)
        method: Calculation method name; unknown names use the default
        tz: IANA timezone the events are expressed in
        now: Evaluation time for the passed flags (default: current time)
        arabic: Use Arabic-Indic digits in display strings

    Returns:
        PrayerDay with events in fixed order. If the astronomical
        calculation fails, the fixed local schedule is returned with
        is_fallback set.

    Raises:
        InvalidCoordinatesError: coordinates out of range
        InvalidDateError: day cannot be parsed
    """
    validate_coordinates(latitude, longitude)
    zone = ZoneInfo(tz)
    if now is None:
        now = datetime.now(zone)
    target = parse_day(day, tz, now)
    method_name, calculation_method = resolve_method(method)

    try:
        moments = _calculate(float(latitude), float(longitude), target, calculation_method, zone)
    except Exception as e:
        logger.warning(
            f"Prayer time calculation failed for ({latitude}, {longitude}) on {target}: {e}; "
            "using fallback schedule"
        )
        return _fallback_day(float(latitude), float(longitude), target, method_name, tz, now, arabic)

    events = tuple(build_event(name, moments[name], now, arabic) for name in PrayerName)
    return PrayerDay(
        latitude=float(latitude),
        longitude=float(longitude),
        date=target,
        method=method_name,
        timezone=tz,
        events=events,
    )


def _calculate(
    latitude: float,
    longitude: float,
    target: date,
    calculation_method: CalculationMethod,
    zone: ZoneInfo,
) -> dict[PrayerName, datetime]:
    """Run adhanpy and check its output is usable."""
    times = PrayerTimes(
        (latitude, longitude),
        datetime(target.year, target.month, target.day),
        calculation_method,
        time_zone=zone,
    )

    moments: dict[PrayerName, datetime] = {}
    for name in PrayerName:
        value = getattr(times, name.value.lower(), None)
        if not isinstance(value, datetime):
            raise ValueError(f"No {name.value} time produced")
        if value.tzinfo is None:
            value = value.replace(tzinfo=ZoneInfo("UTC"))
        moments[name] = value.astimezone(zone)

    ordered = [moments[name] for name in PrayerName]
    if any(later <= earlier for earlier, later in zip(ordered, ordered[1:])):
        raise ValueError("Prayer times are not in chronological order")

    return moments


def _fallback_day(
    latitude: float,
    longitude: float,
    target: date,
    method: str,
    tz: str,
    now: datetime,
    arabic: bool,
) -> PrayerDay:
    """Fixed local-clock schedule, each time rolled to the next day if already past."""
    zone = ZoneInfo(tz)
    events = []
    for name in PrayerName:
        slot = FALLBACK_SCHEDULE[name.value]
        moment = datetime.combine(target, time(slot.hour, slot.minute), tzinfo=zone)
        if moment < now:
            moment += timedelta(days=1)
        events.append(build_event(name, moment, now, arabic))

    return PrayerDay(
        latitude=latitude,
        longitude=longitude,
        date=target,
        method=method,
        timezone=tz,
        events=tuple(events),
        is_fallback=True,
    )

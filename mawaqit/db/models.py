"""Data models."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal

from mawaqit.utils.constants import DEFAULT_PRE_PRAYER_MINUTES


AccuracyStatus = Literal["aligned", "needs_alignment", "calibrating"]
SchedulingState = Literal["idle", "cancelling", "building", "submitting", "done", "failed"]


class PrayerName(str, Enum):
    """The five daily prayers plus sunrise, in chronological order."""

    FAJR = "Fajr"
    SUNRISE = "Sunrise"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"

    @property
    def display_name(self) -> str:
        """Arabic display name."""
        names = {
            PrayerName.FAJR: "الفجر",
            PrayerName.SUNRISE: "الشروق",
            PrayerName.DHUHR: "الظهر",
            PrayerName.ASR: "العصر",
            PrayerName.MAGHRIB: "المغرب",
            PrayerName.ISHA: "العشاء",
        }
        return names[self]

    @property
    def icon(self) -> str:
        icons = {
            PrayerName.FAJR: "🌙",
            PrayerName.SUNRISE: "☀️",
            PrayerName.DHUHR: "🕌",
            PrayerName.ASR: "📿",
            PrayerName.MAGHRIB: "🌅",
            PrayerName.ISHA: "🌟",
        }
        return icons[self]


@dataclass
class Location:
    """Observer position, optionally with a reverse-geocoded address."""

    latitude: float
    longitude: float
    city: str | None = None
    country: str | None = None
    address: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            city=data.get("city"),
            country=data.get("country"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class PrayerEvent:
    """One prayer (or sunrise) moment for a date and location.

    passed/is_next are derived against an evaluation time; use
    dataclasses.replace to get a re-flagged copy, never mutate.
    """

    name: PrayerName
    display_name: str
    time: datetime  # timezone-aware
    display_time: str
    passed: bool = False
    is_next: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name.value,
            "display_name": self.display_name,
            "time": self.time.isoformat(),
            "display_time": self.display_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PrayerEvent":
        return cls(
            name=PrayerName(data["name"]),
            display_name=data["display_name"],
            time=datetime.fromisoformat(data["time"]),
            display_time=data["display_time"],
        )


@dataclass
class PrayerDay:
    """The six events computed for one (location, date, method)."""

    latitude: float
    longitude: float
    date: date
    method: str
    timezone: str
    events: tuple[PrayerEvent, ...]
    is_fallback: bool = False

    def event(self, name: PrayerName) -> PrayerEvent | None:
        for event in self.events:
            if event.name == name:
                return event
        return None

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "date": self.date.isoformat(),
            "method": self.method,
            "timezone": self.timezone,
            "events": [event.to_dict() for event in self.events],
            "is_fallback": self.is_fallback,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PrayerDay":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            date=date.fromisoformat(data["date"]),
            method=data["method"],
            timezone=data["timezone"],
            events=tuple(PrayerEvent.from_dict(e) for e in data["events"]),
            is_fallback=bool(data.get("is_fallback", False)),
        )


@dataclass(frozen=True)
class NextPrayer:
    """The upcoming prayer, possibly tomorrow's Fajr."""

    event: PrayerEvent
    is_tomorrow: bool = False


@dataclass(frozen=True)
class SensorSample:
    """Raw magnetometer reading."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class QiblaReading:
    """Live compass state for one sensor sample."""

    heading: float  # [0, 360)
    qibla_bearing: float  # [0, 360)
    relative_qibla_angle: float  # rotation to apply to the Qibla marker
    accuracy: float  # 0-100 heuristic

    @property
    def accuracy_status(self) -> AccuracyStatus:
        from mawaqit.engine.heading import accuracy_status

        return accuracy_status(self.accuracy)


@dataclass(frozen=True)
class Guidance:
    """Turn instruction derived from heading and Qibla bearing."""

    status: Literal["facing", "close", "turn"]
    difference: float
    direction: Literal["left", "right"] | None = None
    message: str = ""


@dataclass
class NotificationSettings:
    """User-controlled notification policy."""

    enabled: bool = True
    notify_before_prayer: bool = True
    notify_at_prayer_time: bool = True
    azan_sound_enabled: bool = True
    pre_prayer_minutes: int = DEFAULT_PRE_PRAYER_MINUTES
    last_scheduled_date: str | None = None  # ISO date, once-daily guard

    def __post_init__(self) -> None:
        if self.pre_prayer_minutes < 0:
            raise ValueError(f"pre_prayer_minutes must be >= 0, got {self.pre_prayer_minutes}")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationSettings":
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class ScheduledNotificationRequest:
    """One alert submitted to the notification sink."""

    trigger_at: datetime  # timezone-aware
    title: str
    body: str
    sound: bool
    identifier: str  # prayer_<Name>_exact / prayer_<Name>_before


@dataclass
class ScheduleResult:
    """Outcome of one scheduling pass."""

    state: SchedulingState
    requested: int = 0
    scheduled: int = 0
    failed: int = 0
    skipped: bool = False
    identifiers: list[str] = field(default_factory=list)

    @property
    def incomplete(self) -> bool:
        """True when some alerts may be missing."""
        return self.state == "failed" or self.failed > 0

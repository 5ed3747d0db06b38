"""Constants and default values."""

from dataclasses import dataclass


@dataclass
class FallbackTime:
    """Static local-clock time used when the astronomical calculation fails."""

    hour: int
    minute: int


# Kaaba coordinates (degrees)
KAABA_LATITUDE = 21.4225
KAABA_LONGITUDE = 39.8262

EARTH_RADIUS_KM = 6371.0

# Prayer calculation methods by name -> adhanpy CalculationMethod member
CALCULATION_METHODS = {
    "Egyptian": "EGYPTIAN",
    "UmmAlQura": "UMM_AL_QURA",
    "MuslimWorldLeague": "MUSLIM_WORLD_LEAGUE",
    "Karachi": "KARACHI",
    "NorthAmerica": "NORTH_AMERICA",
    "Dubai": "DUBAI",
    "Kuwait": "KUWAIT",
    "Qatar": "QATAR",
    "Singapore": "SINGAPORE",
    "MoonsightingCommittee": "MOON_SIGHTING_COMMITTEE",
}

DEFAULT_CALCULATION_METHOD = "Egyptian"

# Local-clock schedule used when the calculation cannot produce times
FALLBACK_SCHEDULE = {
    "Fajr": FallbackTime(5, 30),
    "Sunrise": FallbackTime(6, 45),
    "Dhuhr": FallbackTime(12, 30),
    "Asr": FallbackTime(15, 45),
    "Maghrib": FallbackTime(18, 20),
    "Isha": FallbackTime(19, 45),
}

# Tomorrow variant of Fajr
TOMORROW_FAJR_NAME = "فجر الغد"
TOMORROW_PREFIX = "غداً"

NOW_TEXT = "الآن"
HOURS_WORD = "ساعة"
MINUTES_WORD = "دقيقة"
MINUTES_PLURAL_WORD = "دقائق"
UNKNOWN_LOCATION = "موقع غير معروف"

# Heading resolver
HEADING_DEAD_ZONE = 0.01
ACCURACY_SCALE = 10
ALIGNED_ACCURACY = 80
NEEDS_ALIGNMENT_ACCURACY = 60
FACING_TOLERANCE_DEGREES = 5
CLOSE_TOLERANCE_DEGREES = 15

# Notifications
NOTIFICATION_PREFIX = "prayer_"
DEFAULT_PRE_PRAYER_MINUTES = 5

# Recompute cached prayer times when moved further than this
RECALCULATE_DISTANCE_KM = 1.0

# Key-value store keys
SETTINGS_KEY = "notification_settings"
LOCATION_KEY = "location"
PRAYER_DAY_KEY = "prayer_day"

ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"

GREGORIAN_MONTHS = [
    "يناير",
    "فبراير",
    "مارس",
    "أبريل",
    "مايو",
    "يونيو",
    "يوليو",
    "أغسطس",
    "سبتمبر",
    "أكتوبر",
    "نوفمبر",
    "ديسمبر",
]

# Monday first, matching date.weekday()
WEEKDAYS = [
    "الاثنين",
    "الثلاثاء",
    "الأربعاء",
    "الخميس",
    "الجمعة",
    "السبت",
    "الأحد",
]

HIJRI_MONTHS = [
    "محرم",
    "صفر",
    "ربيع الأول",
    "ربيع الثاني",
    "جمادى الأولى",
    "جمادى الآخرة",
    "رجب",
    "شعبان",
    "رمضان",
    "شوال",
    "ذو القعدة",
    "ذو الحجة",
]

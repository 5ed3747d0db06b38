"""Qibla bearing and distance from great-circle trigonometry."""

import math

from mawaqit.engine.prayer_times import validate_coordinates
from mawaqit.utils.constants import EARTH_RADIUS_KM, KAABA_LATITUDE, KAABA_LONGITUDE


def normalize_degrees(angle: float) -> float:
    """Normalize an angle into [0, 360)."""
    result = angle % 360.0
    # -1e-15 % 360 == 360.0 in floating point
    return 0.0 if result >= 360.0 else result


def qibla_bearing(latitude: float, longitude: float) -> float:
    """Initial bearing from the observer to the Kaaba, degrees from true north.

    Raises:
        InvalidCoordinatesError: coordinates out of range
    """
    validate_coordinates(latitude, longitude)

    lat = math.radians(latitude)
    kaaba_lat = math.radians(KAABA_LATITUDE)
    delta_lng = math.radians(KAABA_LONGITUDE) - math.radians(longitude)

    y = math.sin(delta_lng)
    x = math.cos(lat) * math.tan(kaaba_lat) - math.sin(lat) * math.cos(delta_lng)

    bearing = math.degrees(math.atan2(y, x))
    if bearing < 0:
        bearing += 360
    return normalize_degrees(bearing)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_to_kaaba_km(latitude: float, longitude: float) -> float:
    """Great-circle distance from the observer to the Kaaba.

    Raises:
        InvalidCoordinatesError: coordinates out of range
    """
    validate_coordinates(latitude, longitude)
    return haversine_km(latitude, longitude, KAABA_LATITUDE, KAABA_LONGITUDE)

"""Tests for Qibla bearing and distance."""

import pytest

from mawaqit.engine.qibla import distance_to_kaaba_km, haversine_km, normalize_degrees, qibla_bearing
from mawaqit.utils.constants import KAABA_LATITUDE, KAABA_LONGITUDE
from mawaqit.utils.exceptions import InvalidCoordinatesError


def test_riyadh_bearing():
    """Riyadh faces west-southwest."""
    bearing = qibla_bearing(24.7136, 46.6753)

    assert bearing == pytest.approx(243.8, abs=1.0)


def test_riyadh_distance():
    """Great-circle distance Riyadh to Mecca."""
    distance = distance_to_kaaba_km(24.7136, 46.6753)

    assert 780 <= distance <= 800


def test_known_bearings():
    """Reference cities in each quadrant."""
    # London: roughly south-east
    assert qibla_bearing(51.5074, -0.1278) == pytest.approx(119, abs=1.5)
    # Jakarta: roughly west-north-west
    assert qibla_bearing(-6.2088, 106.8456) == pytest.approx(295, abs=1.5)
    # Cairo: roughly south-east
    assert qibla_bearing(30.0444, 31.2357) == pytest.approx(136, abs=1.5)


def test_distance_at_kaaba_is_zero():
    assert distance_to_kaaba_km(KAABA_LATITUDE, KAABA_LONGITUDE) == pytest.approx(0, abs=1e-6)


def test_bearing_range():
    """Bearing stays in [0, 360) across the globe."""
    for latitude in range(-85, 90, 17):
        for longitude in range(-180, 181, 30):
            bearing = qibla_bearing(latitude, longitude)
            assert 0 <= bearing < 360


def test_bearing_continuity():
    """Small moves give small bearing changes away from the Kaaba."""
    base = qibla_bearing(40.0, -3.0)
    moved = qibla_bearing(40.001, -3.001)

    assert abs(base - moved) < 0.01


def test_haversine_symmetry():
    assert haversine_km(10, 20, 30, 40) == pytest.approx(haversine_km(30, 40, 10, 20))


def test_normalize_degrees():
    assert normalize_degrees(-90) == 270
    assert normalize_degrees(360) == 0
    assert normalize_degrees(725) == 5
    assert normalize_degrees(-1e-15) == 0


@pytest.mark.parametrize("latitude,longitude", [(100, 0), (0, -200), (float("nan"), 0)])
def test_invalid_coordinates(latitude, longitude):
    """Invalid input raises instead of returning NaN."""
    with pytest.raises(InvalidCoordinatesError):
        qibla_bearing(latitude, longitude)
    with pytest.raises(InvalidCoordinatesError):
        distance_to_kaaba_km(latitude, longitude)

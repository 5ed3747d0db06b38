"""Tests for heading resolution and turn guidance."""

import pytest

from mawaqit.db.models import SensorSample
from mawaqit.engine.heading import (
    accuracy_status,
    compute_heading,
    estimate_accuracy,
    guidance,
    parse_heading,
    resolve,
)
from mawaqit.utils.exceptions import InvalidInputError


def test_compute_heading_axes():
    assert compute_heading(SensorSample(1, 0, 0)) == pytest.approx(0)
    assert compute_heading(SensorSample(0, 1, 0)) == pytest.approx(90)
    assert compute_heading(SensorSample(-1, 0, 0)) == pytest.approx(180)
    assert compute_heading(SensorSample(0, -1, 0)) == pytest.approx(270)


def test_compute_heading_dead_zone():
    """Samples near the origin read as north."""
    assert compute_heading(SensorSample(0.005, -0.01, 3)) == 0.0
    assert compute_heading(SensorSample(0, 0, 0)) == 0.0


def test_estimate_accuracy_clamped():
    assert estimate_accuracy(SensorSample(0, 0, 5)) == 50
    assert estimate_accuracy(SensorSample(0, 0, -7)) == 70
    assert estimate_accuracy(SensorSample(0, 0, 42)) == 100


def test_accuracy_status_tiers():
    """aligned above 80, needs_alignment above 60, calibrating otherwise."""
    assert accuracy_status(95) == "aligned"
    assert accuracy_status(80) == "needs_alignment"
    assert accuracy_status(61) == "needs_alignment"
    assert accuracy_status(60) == "calibrating"
    assert accuracy_status(0) == "calibrating"


def test_resolve_relative_angle():
    """Relative angle rotates the Qibla marker against the heading."""
    reading = resolve(SensorSample(0, 1, 9), qibla_bearing=243.8)

    assert reading.heading == pytest.approx(90)
    assert reading.relative_qibla_angle == pytest.approx(153.8)
    assert reading.accuracy == 90
    assert reading.accuracy_status == "aligned"


def test_resolve_wraps_relative_angle():
    reading = resolve(SensorSample(1, 0, 0), qibla_bearing=360)

    assert reading.qibla_bearing == 0
    assert reading.relative_qibla_angle == 0
    assert reading.accuracy_status == "calibrating"


def test_guidance_facing():
    result = guidance(240, 243.8)

    assert result.status == "facing"
    assert result.direction is None


def test_guidance_close():
    result = guidance(230, 243.8)

    assert result.status == "close"


def test_guidance_turn_right():
    result = guidance(200, 243.8)

    assert result.status == "turn"
    assert result.direction == "right"
    assert "44" in result.message


def test_guidance_turn_left():
    result = guidance(300, 243.8)

    assert result.status == "turn"
    assert result.direction == "left"
    assert result.difference == pytest.approx(56.2)


def test_guidance_uses_shortest_difference():
    """Difference never exceeds 180 degrees."""
    result = guidance(10, 350)

    assert result.difference == pytest.approx(20)


def test_parse_heading():
    assert parse_heading("90") == 90
    assert parse_heading("-90") == 270
    assert parse_heading("720.5") == pytest.approx(0.5)


@pytest.mark.parametrize("text", ["nan", "inf", "-inf", "north", ""])
def test_parse_heading_rejects_non_finite_and_garbage(text):
    with pytest.raises(InvalidInputError):
        parse_heading(text)


def test_guidance_rejects_non_finite_heading():
    with pytest.raises(InvalidInputError):
        guidance(float("nan"), 120)
    with pytest.raises(InvalidInputError):
        guidance(10, float("inf"))

"""Compass heading resolution and Qibla guidance.

The accuracy score is a rough heuristic (scaled magnitude of the
vertical axis), not a calibrated magnetometer model.
"""

import math

from mawaqit.db.models import AccuracyStatus, Guidance, QiblaReading, SensorSample
from mawaqit.engine.qibla import normalize_degrees
from mawaqit.utils.exceptions import InvalidInputError
from mawaqit.utils.constants import (
    ACCURACY_SCALE,
    ALIGNED_ACCURACY,
    CLOSE_TOLERANCE_DEGREES,
    FACING_TOLERANCE_DEGREES,
    HEADING_DEAD_ZONE,
    NEEDS_ALIGNMENT_ACCURACY,
)


def compute_heading(sample: SensorSample) -> float:
    """Heading in [0, 360) from the horizontal sensor axes.

    Near the origin atan2 is unstable, so samples inside the dead zone
    read as 0.
    """
    if abs(sample.x) <= HEADING_DEAD_ZONE and abs(sample.y) <= HEADING_DEAD_ZONE:
        return 0.0
    return normalize_degrees(math.degrees(math.atan2(sample.y, sample.x)))


def estimate_accuracy(sample: SensorSample) -> float:
    """Heuristic accuracy score clamped to [0, 100]."""
    return max(0.0, min(100.0, abs(sample.z) * ACCURACY_SCALE))


def accuracy_status(accuracy: float) -> AccuracyStatus:
    """Bucket an accuracy score: aligned (>80), needs_alignment (60-80], calibrating (<=60)."""
    if accuracy > ALIGNED_ACCURACY:
        return "aligned"
    if accuracy > NEEDS_ALIGNMENT_ACCURACY:
        return "needs_alignment"
    return "calibrating"


def resolve(sample: SensorSample, qibla_bearing: float) -> QiblaReading:
    """Map a raw sample and the Qibla bearing to a QiblaReading."""
    heading = compute_heading(sample)
    bearing = normalize_degrees(qibla_bearing)
    return QiblaReading(
        heading=heading,
        qibla_bearing=bearing,
        relative_qibla_angle=normalize_degrees(360 - heading + bearing),
        accuracy=estimate_accuracy(sample),
    )


def parse_heading(text: str) -> float:
    """Parse a user-supplied heading into [0, 360).

    Raises:
        InvalidInputError: not a number, or nan/inf
    """
    try:
        value = float(text)
    except ValueError as e:
        raise InvalidInputError(f"Heading must be a number, got {text!r}") from e
    if not math.isfinite(value):
        raise InvalidInputError(f"Heading must be finite, got {text!r}")
    return normalize_degrees(value)


def guidance(heading: float, qibla_bearing: float) -> Guidance:
    """Tell the user how far to turn to face the Qibla."""
    if not (math.isfinite(heading) and math.isfinite(qibla_bearing)):
        raise InvalidInputError("Heading and bearing must be finite")
    raw = abs(qibla_bearing - heading)
    diff = min(raw, 360 - raw)

    if diff <= FACING_TOLERANCE_DEGREES:
        return Guidance(status="facing", difference=diff, message="أنت تواجه القبلة مباشرة")
    if diff <= CLOSE_TOLERANCE_DEGREES:
        return Guidance(status="close", difference=diff, message="قريب جداً، استمر في التعديل")

    direction = "right" if qibla_bearing > heading else "left"
    word = "يميناً" if direction == "right" else "يساراً"
    return Guidance(
        status="turn",
        difference=diff,
        direction=direction,
        message=f"استدر {word} {round(diff)} درجة",
    )

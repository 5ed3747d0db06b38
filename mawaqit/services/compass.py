"""Compass session: sensor stream subscription and Qibla readings."""

import logging
from typing import Callable, Protocol

from mawaqit.db.models import Guidance, Location, QiblaReading, SensorSample
from mawaqit.engine.heading import guidance, resolve
from mawaqit.engine.qibla import qibla_bearing
from mawaqit.utils.exceptions import SensorUnavailableError

logger = logging.getLogger(__name__)

SampleCallback = Callable[[SensorSample], None]


class SensorStream(Protocol):
    """Magnetometer samples at roughly 10 Hz."""

    def is_available(self) -> bool:
        ...

    def subscribe(self, callback: SampleCallback) -> Callable[[], None]:
        """Start delivering samples; returns an unsubscribe function."""
        ...


class ManualSensorStream:
    """Stream fed by explicit emit() calls (recorded samples, tests)."""

    def __init__(self, available: bool = True):
        self.available = available
        self.subscribers: list[SampleCallback] = []

    def is_available(self) -> bool:
        return self.available

    def subscribe(self, callback: SampleCallback) -> Callable[[], None]:
        self.subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self.subscribers:
                self.subscribers.remove(callback)

        return unsubscribe

    def emit(self, sample: SensorSample) -> None:
        for callback in list(self.subscribers):
            callback(sample)


class CompassSession:
    """Turns sensor samples into QiblaReadings for one observer location."""

    def __init__(
        self,
        stream: SensorStream,
        location: Location,
        on_update: Callable[[QiblaReading], None] | None = None,
    ):
        self.stream = stream
        self.on_update = on_update
        self.latest: QiblaReading | None = None
        self.sample_count = 0
        self._unsubscribe: Callable[[], None] | None = None
        self.set_location(location)

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def set_location(self, location: Location) -> None:
        """Bearing depends on location only, so it is recomputed here and nowhere else."""
        self.location = location
        self.qibla_bearing = qibla_bearing(location.latitude, location.longitude)

    def start(self) -> None:
        """Subscribe to the stream.

        Raises:
            SensorUnavailableError: stream reports no compass hardware
        """
        if self.active:
            return
        if not self.stream.is_available():
            raise SensorUnavailableError("Compass is not available on this device")

        self._unsubscribe = self.stream.subscribe(self._handle)
        logger.info("Compass session started")

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.info(f"Compass session stopped after {self.sample_count} samples")

    def _handle(self, sample: SensorSample) -> None:
        reading = resolve(sample, self.qibla_bearing)
        self.latest = reading
        self.sample_count += 1
        if self.on_update:
            self.on_update(reading)

    def guidance(self) -> Guidance | None:
        """Turn instruction for the latest reading, None before the first sample."""
        if self.latest is None:
            return None
        return guidance(self.latest.heading, self.latest.qibla_bearing)

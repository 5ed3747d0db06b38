"""Exception hierarchy."""


class MawaqitError(Exception):
    """Base class for all errors raised by the core."""


class InvalidInputError(MawaqitError, ValueError):
    """Input the engine cannot compute with."""


class InvalidCoordinatesError(InvalidInputError):
    """Latitude/longitude out of range or not finite."""


class InvalidDateError(InvalidInputError):
    """Calendar date that cannot be parsed."""


class UnavailableError(MawaqitError):
    """An external collaborator cannot be used right now.

    Kept apart from computation errors: callers retry acquisition
    (permission, hardware), never the computation itself.
    """


class LocationUnavailableError(UnavailableError):
    """No location has been shared or the provider failed."""


class SensorUnavailableError(UnavailableError):
    """No compass hardware or the sensor stream could not start."""


class NotificationPermissionError(UnavailableError):
    """The notification sink refuses to accept requests."""


class StoreVersionError(MawaqitError):
    """The key-value store was written by a newer schema than this build knows."""

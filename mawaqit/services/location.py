"""Location provider backed by the key-value store and reverse geocoding."""

import asyncio
import logging
from typing import Protocol

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from mawaqit.db.models import Location
from mawaqit.db.repository import Repository
from mawaqit.engine.prayer_times import validate_coordinates
from mawaqit.utils.constants import UNKNOWN_LOCATION
from mawaqit.utils.exceptions import LocationUnavailableError

logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    async def get_current_location(self) -> Location | None:
        """Current observer location, or None when unavailable."""
        ...


def format_address(address: dict | None) -> str:
    """Join city, region and country, skipping a region equal to the city."""
    if not address:
        return UNKNOWN_LOCATION

    city = address.get("city") or address.get("town") or address.get("village")
    region = address.get("state") or address.get("region")
    country = address.get("country")

    parts = []
    if city:
        parts.append(city)
    if region and region != city:
        parts.append(region)
    if country:
        parts.append(country)

    return "، ".join(parts) if parts else UNKNOWN_LOCATION


class StoredLocationProvider:
    """Serves the last location the user shared."""

    def __init__(self, repo: Repository, user_agent: str, geocode: bool = True):
        self.repo = repo
        self.geocode = geocode
        self.geolocator = Nominatim(user_agent=user_agent) if geocode else None

    async def get_current_location(self) -> Location | None:
        return await self.repo.get_location()

    async def require_location(self) -> Location:
        """Current location or LocationUnavailableError."""
        location = await self.get_current_location()
        if location is None:
            raise LocationUnavailableError("No location has been shared yet")
        return location

    async def set_location(self, latitude: float, longitude: float) -> Location:
        """Validate, reverse-geocode and persist a new location.

        Raises:
            InvalidCoordinatesError: coordinates out of range
        """
        validate_coordinates(latitude, longitude)
        location = Location(latitude=float(latitude), longitude=float(longitude))

        if self.geolocator is not None:
            address = await self._reverse(location) or {}
            location.city = address.get("city") or address.get("town") or address.get("state") or UNKNOWN_LOCATION
            location.country = address.get("country", "")
            location.address = format_address(address)

        await self.repo.save_location(location)
        logger.info(f"Location updated: ({location.latitude}, {location.longitude}) {location.address or ''}")
        return location

    async def _reverse(self, location: Location) -> dict | None:
        try:
            result = await asyncio.to_thread(
                self.geolocator.reverse,
                (location.latitude, location.longitude),
                language="ar",
                timeout=10,
            )
        except GeopyError as e:
            logger.error(f"Reverse geocoding failed: {e}")
            return None

        if result is None:
            return None
        return result.raw.get("address")

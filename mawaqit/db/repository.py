"""Key-value store - persisted JSON documents by key."""

import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from mawaqit.db.models import Location, NotificationSettings, PrayerDay
from mawaqit.utils.constants import LOCATION_KEY, PRAYER_DAY_KEY, SETTINGS_KEY

logger = logging.getLogger(__name__)


class Repository:
    """Key-value access layer over SQLite.

    Values are JSON documents; a write replaces the whole value for its
    key (last write wins, no field merging).
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        logger.info(f"Connected to key-value store at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Key-value store connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # Raw key-value operations

    async def get(self, key: str) -> Any | None:
        """Get the JSON value stored under key, or None."""
        async with self.db.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
            if row is None:
                return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt value for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> None:
        """Replace the value stored under key."""
        await self.db.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, json.dumps(value, ensure_ascii=False)),
        )
        await self.db.commit()

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        await self.db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await self.db.commit()

    # Typed accessors

    async def get_settings(self) -> NotificationSettings:
        """Persisted notification settings, or defaults."""
        data = await self.get(SETTINGS_KEY)
        if not data:
            return NotificationSettings()
        try:
            return NotificationSettings.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid stored settings, using defaults: {e}")
            return NotificationSettings()

    async def save_settings(self, settings: NotificationSettings) -> None:
        await self.set(SETTINGS_KEY, settings.to_dict())

    async def get_location(self) -> Location | None:
        data = await self.get(LOCATION_KEY)
        if not data:
            return None
        try:
            return Location.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid stored location: {e}")
            return None

    async def save_location(self, location: Location) -> None:
        await self.set(LOCATION_KEY, location.to_dict())

    async def get_prayer_day(self) -> PrayerDay | None:
        data = await self.get(PRAYER_DAY_KEY)
        if not data:
            return None
        try:
            return PrayerDay.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid cached prayer day: {e}")
            return None

    async def save_prayer_day(self, day: PrayerDay) -> None:
        await self.set(PRAYER_DAY_KEY, day.to_dict())

    async def clear_prayer_day(self) -> None:
        await self.delete(PRAYER_DAY_KEY)

"""Configuration management from environment variables."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from mawaqit.utils.constants import CALCULATION_METHODS, DEFAULT_CALCULATION_METHOD

# Load .env file if it exists
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_CHAT_ID: int = int(os.getenv("TELEGRAM_CHAT_ID", "0"))

    # Key-value store
    STORE_PATH: Path = Path(os.getenv("STORE_PATH", "./data/mawaqit.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Prayer times
    CALCULATION_METHOD: str = os.getenv("CALCULATION_METHOD", DEFAULT_CALCULATION_METHOD)
    TIMEZONE: str = os.getenv("TIMEZONE", "UTC")
    # Timezone of the once-daily scheduling guard
    REFERENCE_TIMEZONE: str = os.getenv("REFERENCE_TIMEZONE", "UTC")
    ARABIC_NUMERALS: bool = _env_bool("ARABIC_NUMERALS", "true")
    # Azan recording sent with exact alerts: file_id, URL or local path (empty disables)
    AZAN_AUDIO: str = os.getenv("AZAN_AUDIO", "").strip()

    # Background jobs (seconds)
    TICK_INTERVAL: int = int(os.getenv("TICK_INTERVAL", "60"))
    REFRESH_INTERVAL: int = int(os.getenv("REFRESH_INTERVAL", str(6 * 60 * 60)))

    # Reverse geocoding
    GEOCODE_LOCATIONS: bool = _env_bool("GEOCODE_LOCATIONS", "true")
    GEOCODER_USER_AGENT: str = os.getenv("GEOCODER_USER_AGENT", "mawaqit-bot")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable is required")

        if not cls.TELEGRAM_CHAT_ID:
            raise ValueError("TELEGRAM_CHAT_ID environment variable is required")

        if cls.CALCULATION_METHOD not in CALCULATION_METHODS:
            raise ValueError(
                f"Unknown CALCULATION_METHOD {cls.CALCULATION_METHOD!r}. "
                f"Choose one of: {', '.join(CALCULATION_METHODS)}"
            )

        for name in ("TIMEZONE", "REFERENCE_TIMEZONE"):
            try:
                ZoneInfo(getattr(cls, name))
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Invalid {name}: {getattr(cls, name)}") from e

        if cls.TICK_INTERVAL <= 0 or cls.REFRESH_INTERVAL <= 0:
            raise ValueError("TICK_INTERVAL and REFRESH_INTERVAL must be positive")

        # Ensure store directory exists
        cls.STORE_PATH.parent.mkdir(parents=True, exist_ok=True)

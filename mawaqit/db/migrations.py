"""Versioned schema migrations for the key-value store.

The applied version lives in SQLite's user_version pragma; each step
runs in its own transaction and bumps it, so a crash mid-way resumes
from the last completed step.
"""

import logging
from pathlib import Path

import aiosqlite

from mawaqit.utils.exceptions import StoreVersionError

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent

# (version, script) in ascending order
MIGRATIONS: list[tuple[int, str]] = [
    (1, "schema.sql"),
]

LATEST_VERSION = MIGRATIONS[-1][0]


async def schema_version(db: aiosqlite.Connection) -> int:
    async with db.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
    return row[0]


async def run_migrations(db_path: Path) -> int:
    """Bring the store at db_path up to LATEST_VERSION.

    Returns:
        The schema version after migrating

    Raises:
        StoreVersionError: the file is newer than this build
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        current = await schema_version(db)
        if current > LATEST_VERSION:
            raise StoreVersionError(
                f"Store {db_path} is at schema {current}, this build supports up to {LATEST_VERSION}"
            )

        for version, script in MIGRATIONS:
            if version <= current:
                continue
            sql = (SCHEMA_DIR / script).read_text(encoding="utf-8")
            # PRAGMA cannot be parameterized; version is an int from MIGRATIONS
            await db.executescript(f"BEGIN;\n{sql}\nPRAGMA user_version = {version};\nCOMMIT;")
            logger.info(f"Key-value store at {db_path} migrated to schema {version}")
            current = version

    return current

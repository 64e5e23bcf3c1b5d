import sqlite3
import sqlite_utils
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DB_PATH = os.getenv("DATABASE_PATH", "/data/radiofeed.db")

SETTINGS_TABLE = "settings"


def get_db(path: Optional[str] = None) -> sqlite_utils.Database:
    """Open the settings database, or an in-memory one if the path is unusable.

    Settings then only last for this process.
    """
    path = path or DB_PATH
    try:
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        db = sqlite_utils.Database(path)
        db[SETTINGS_TABLE].create({"key": str, "value": str}, pk="key", if_not_exists=True)
        return db
    except (OSError, sqlite3.Error) as e:
        logger.warning("Settings storage %s unusable, keeping settings in memory: %s", path, e)
        return sqlite_utils.Database(memory=True)


class SettingsStore:
    """Optional-valued key/value settings. A missing key is not an error."""

    def __init__(self, db: Optional[sqlite_utils.Database] = None):
        self.db = db if db is not None else get_db()

    def _get(self, key: str) -> Optional[str]:
        if SETTINGS_TABLE not in self.db.table_names():
            return None
        rows = list(self.db.query(f"SELECT value FROM {SETTINGS_TABLE} WHERE key = ?", [key]))
        return rows[0]["value"] if rows else None

    def _put(self, key: str, value: str):
        self.db[SETTINGS_TABLE].upsert({"key": key, "value": value}, pk="key")

    def get_string(self, key: str) -> Optional[str]:
        return self._get(key)

    def get_bool(self, key: str) -> Optional[bool]:
        value = self._get(key)
        if value is None:
            return None
        return value == "true"

    def put_string(self, key: str, value: str):
        self._put(key, value)

    def put_bool(self, key: str, value: bool):
        self._put(key, "true" if value else "false")

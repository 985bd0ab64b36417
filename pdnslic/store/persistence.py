"""
Settings store implementations.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import closing
from pathlib import Path
from typing import Any

from pdnslic.common.exceptions import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS global_settings (
        setting_key TEXT PRIMARY KEY,
        setting_value TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS domains (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE
    )
    """,
)


class SQLiteSettingsStore:
    """Settings and domain count backed by a SQLite database file."""

    def __init__(self, db_path: Path, timeout: float = 5.0) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._execute_script(_SCHEMA)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=self.timeout)

    def _execute_script(self, statements: tuple[str, ...]) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                for statement in statements:
                    conn.execute(statement)
        except sqlite3.Error as err:
            msg = f"Cannot initialise settings database {self.db_path}: {err}"
            raise StoreError(msg) from err

    def _fetchone(self, query: str, params: tuple[Any, ...] = ()) -> tuple | None:
        try:
            with closing(self._connect()) as conn:
                return conn.execute(query, params).fetchone()
        except sqlite3.Error as err:
            msg = f"Settings database read failed: {err}"
            raise StoreError(msg) from err

    def _write(self, query: str, params: tuple[Any, ...]) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(query, params)
        except sqlite3.Error as err:
            msg = f"Settings database write failed: {err}"
            raise StoreError(msg) from err

    def get(self, key: str) -> str | None:
        row = self._fetchone(
            "SELECT setting_value FROM global_settings WHERE setting_key = ?", (key,)
        )
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        self._write(
            "INSERT INTO global_settings (setting_key, setting_value) VALUES (?, ?) "
            "ON CONFLICT(setting_key) DO UPDATE SET setting_value = excluded.setting_value",
            (key, value),
        )

    def delete(self, key: str) -> None:
        self._write("DELETE FROM global_settings WHERE setting_key = ?", (key,))

    def insert_if_absent(self, key: str, value: str) -> str:
        """Store value unless a non-empty one exists; return the stored value."""
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    "INSERT INTO global_settings (setting_key, setting_value) VALUES (?, ?) "
                    "ON CONFLICT(setting_key) DO UPDATE SET setting_value = excluded.setting_value "
                    "WHERE global_settings.setting_value IS NULL "
                    "OR global_settings.setting_value = ''",
                    (key, value),
                )
                row = conn.execute(
                    "SELECT setting_value FROM global_settings WHERE setting_key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as err:
            msg = f"Settings database upsert failed: {err}"
            raise StoreError(msg) from err
        return row[0]

    def count_domains(self) -> int:
        row = self._fetchone("SELECT COUNT(*) FROM domains")
        return int(row[0]) if row else 0

    def add_domain(self, name: str) -> None:
        self._write("INSERT INTO domains (name) VALUES (?)", (name,))
        logger.debug("Domain %s added", name)


class InMemorySettingsStore:
    """Process-local store, used by tests and embedding applications."""

    def __init__(
        self, settings: dict[str, str] | None = None, domain_count: int = 0
    ) -> None:
        self.settings: dict[str, str] = dict(settings or {})
        self.domain_count = domain_count
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self.settings.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.settings[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self.settings.pop(key, None)

    def insert_if_absent(self, key: str, value: str) -> str:
        with self._lock:
            if not self.settings.get(key):
                self.settings[key] = value
            return self.settings[key]

    def count_domains(self) -> int:
        return self.domain_count

    def add_domain(self, name: str) -> None:  # noqa: ARG002
        with self._lock:
            self.domain_count += 1

"""SQLite-backed per-configuration options store.

Options are keyed by the reduced, source-independent identity
(subsystem code, CEPO index, configuration index), so live and playback
streams of the same configuration share one set of options.
"""

import sqlite3
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pandas as pd

from adcpscreen.ensemble.config_key import ConfigKey, EnsembleSource
from adcpscreen.schemas.options import ScreenOptions

__all__ = ['OptionsStore']

logger = logging.getLogger(__name__)


class OptionsStore:
    """Persists ScreenOptions per configuration.

    **Database Schema:**

    SQLite table `screen_options`:

    - subsystem_code, cepo_index, ss_config_index: reduced identity (primary key)
    - options_json: ScreenOptions serialized as JSON
    - created_at, updated_at: ISO timestamps (UTC)

    **Thread Safety:**

    One connection opened with ``check_same_thread=False``; every statement
    runs under an internal lock.

    **Typical Usage:**

        store = OptionsStore(db_path, default_options=config.screening)
        options = store.get_options(key)        # defaults if never saved
        store.save_options(key, options.with_changes(remove_ship_speed=False))
        keys = store.known_configs(EnsembleSource.PLAYBACK)
        store.close()
    """

    def __init__(self, db_path: Path | str, default_options: Optional[ScreenOptions] = None):
        """Initialize store.

        Parameters
        ----------
        db_path : Path or str
            Path to SQLite database file. Created if it doesn't exist.
        default_options : ScreenOptions, optional
            Returned for configurations that were never saved.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.default_options = default_options if default_options is not None else ScreenOptions()

        self._conn = None
        self._lock = threading.Lock()

        self._init_database()
        logger.info("Options store initialized: %s", self.db_path)

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        conn = self._get_connection()

        with self._lock:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS screen_options (
                    subsystem_code TEXT NOT NULL,
                    cepo_index INTEGER NOT NULL,
                    ss_config_index INTEGER NOT NULL,
                    options_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (subsystem_code, cepo_index, ss_config_index)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_screen_options_cepo
                ON screen_options(cepo_index)
            """)
            conn.commit()

    def get_options(self, key: ConfigKey) -> ScreenOptions:
        """Saved options for ``key``, or the defaults if none are saved."""
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(
                """SELECT options_json FROM screen_options
                   WHERE subsystem_code = ? AND cepo_index = ? AND ss_config_index = ?""",
                key.store_id,
            ).fetchone()

        if row is None:
            return self.default_options
        return ScreenOptions.model_validate_json(row["options_json"])

    def save_options(self, key: ConfigKey, options: ScreenOptions) -> None:
        """Insert or replace the options for ``key``."""
        now = datetime.now(timezone.utc).isoformat()
        conn = self._get_connection()
        with self._lock:
            conn.execute(
                """INSERT INTO screen_options
                       (subsystem_code, cepo_index, ss_config_index, options_json,
                        created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(subsystem_code, cepo_index, ss_config_index)
                   DO UPDATE SET options_json = excluded.options_json,
                                 updated_at = excluded.updated_at""",
                (*key.store_id, options.model_dump_json(), now, now),
            )
            conn.commit()
        logger.debug("Saved options for %s", key)

    def delete_options(self, key: ConfigKey) -> bool:
        """Forget the saved options for ``key``. Returns True if a row was deleted."""
        conn = self._get_connection()
        with self._lock:
            cursor = conn.execute(
                """DELETE FROM screen_options
                   WHERE subsystem_code = ? AND cepo_index = ? AND ss_config_index = ?""",
                key.store_id,
            )
            conn.commit()
        return cursor.rowcount > 0

    def known_configs(self, source: EnsembleSource = EnsembleSource.PLAYBACK) -> List[ConfigKey]:
        """Every saved configuration, as keys tagged with ``source``."""
        conn = self._get_connection()
        with self._lock:
            rows = conn.execute(
                """SELECT subsystem_code, cepo_index, ss_config_index FROM screen_options
                   ORDER BY cepo_index, subsystem_code, ss_config_index"""
            ).fetchall()
        return [
            ConfigKey(row["subsystem_code"], row["cepo_index"], row["ss_config_index"], source)
            for row in rows
        ]

    def get_all(self) -> pd.DataFrame:
        """All saved configurations with one column per option."""
        conn = self._get_connection()
        with self._lock:
            rows = conn.execute(
                """SELECT subsystem_code, cepo_index, ss_config_index, options_json, updated_at
                   FROM screen_options ORDER BY cepo_index, subsystem_code, ss_config_index"""
            ).fetchall()

        records = []
        for row in rows:
            record = {
                "subsystem_code": row["subsystem_code"],
                "cepo_index": row["cepo_index"],
                "ss_config_index": row["ss_config_index"],
                "updated_at": row["updated_at"],
            }
            record.update(ScreenOptions.model_validate_json(row["options_json"]).model_dump(mode="json"))
            records.append(record)
        return pd.DataFrame(records)

    def close(self):
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

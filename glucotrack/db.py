import sqlite3
from pathlib import Path

from glucotrack.config import get_settings

READINGS_KEY = "glucose_readings"
CHAT_ID_KEY = "telegram_chat_id"


def get_connection(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


class KeyValueStore:
    """Opaque string blobs keyed by name, kept in a single SQLite table."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else get_settings().db_path
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str, default: str | None = None) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return row["value"]

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO settings(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))


def get_chat_id(kv: KeyValueStore) -> str | None:
    chat_id = kv.get(CHAT_ID_KEY)
    if chat_id is None or not chat_id.strip():
        return None
    return chat_id.strip()


def set_chat_id(kv: KeyValueStore, chat_id: str) -> None:
    cleaned = chat_id.strip()
    if cleaned:
        kv.set(CHAT_ID_KEY, cleaned)
    else:
        kv.delete(CHAT_ID_KEY)

"""
Strike Storage Module
A small SQLite-backed key-value store holding per-author strike counts.
Values are stored JSON-encoded so any plain value round-trips.
"""
import json
import logging
import sqlite3
from typing import Any

from config import STRIKES_DB_PATH

logger = logging.getLogger(__name__)

DB_PATH = STRIKES_DB_PATH


def get_db_connection():
    """Get a database connection with WAL mode enabled."""
    conn = sqlite3.connect(DB_PATH)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


def init_db() -> None:
    """Create the key-value table if it does not exist yet."""
    conn = get_db_connection()
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()
    logger.info(f"Strike store ready at {DB_PATH}")


def kv_get(key: str, default: Any = None) -> Any:
    """
    Read a value from the store.

    Args:
        key: Store key, e.g. ``u_alice_strikes``
        default: Returned when the key has never been written

    Returns:
        The decoded value, or ``default``
    """
    conn = get_db_connection()
    try:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
    except sqlite3.Error as e:
        logger.error(f"Failed to read {key}: {e}")
        raise
    finally:
        conn.close()

    if row is None:
        return default
    return json.loads(row[0])


def kv_put(key: str, value: Any) -> None:
    """Write (or overwrite) a value in the store."""
    conn = get_db_connection()
    try:
        conn.execute(
            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
            (key, json.dumps(value)),
        )
        conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Failed to write {key}: {e}")
        raise
    finally:
        conn.close()
    logger.debug(f"Stored {key}={value!r}")

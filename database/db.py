"""Database connection and initialization."""

import sqlite3
from contextlib import contextmanager
from typing import Generator
import threading

from config import DATABASE_PATH

# Database lock for write operations
_db_lock = threading.Lock()


def init_db():
    """Initialize the database with required tables."""
    with _db_lock:
        conn = sqlite3.connect(DATABASE_PATH)
        cursor = conn.cursor()

        # Key-value entries - each value is a whole JSON document
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        conn.commit()
        conn.close()


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def get_db_lock() -> threading.Lock:
    """Get the database write lock."""
    return _db_lock

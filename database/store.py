"""Persisted game history and statistics."""

import json
import logging
from typing import Any, List, Optional

from teenpatti.records import GameResult, GameStats
from .db import get_db, get_db_lock

logger = logging.getLogger(__name__)

HISTORY_KEY = 'gameHistory'
STATS_KEY = 'gameStats'


class GameStore:
    """
    Reads and writes the two persisted entries.

    Each entry is rewritten in full on every save. A missing or malformed
    entry loads as the empty default instead of failing.
    """

    @staticmethod
    def _read(key: str) -> Optional[Any]:
        with get_db() as conn:
            cursor = conn.execute(
                "SELECT value_json FROM kv_store WHERE key = ?", (key,)
            )
            row = cursor.fetchone()

        if row is None:
            return None
        try:
            return json.loads(row['value_json'])
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed %s entry: %s", key, e)
            return None

    @staticmethod
    def _write(key: str, value: Any):
        value_json = json.dumps(value)
        with get_db_lock():
            with get_db() as conn:
                conn.execute('''
                    INSERT OR REPLACE INTO kv_store (key, value_json, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                ''', (key, value_json))
                conn.commit()
        logger.debug("Saved %s (%d bytes)", key, len(value_json))

    @staticmethod
    def load_history() -> List[GameResult]:
        """Load the settled-game log, oldest first."""
        data = GameStore._read(HISTORY_KEY)
        if data is None:
            return []
        try:
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return [GameResult.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed %s entry: %s", HISTORY_KEY, e)
            return []

    @staticmethod
    def save_history(results: List[GameResult]):
        GameStore._write(HISTORY_KEY, [r.to_dict() for r in results])

    @staticmethod
    def load_stats() -> GameStats:
        data = GameStore._read(STATS_KEY)
        if data is None:
            return GameStats()
        try:
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return GameStats.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed %s entry: %s", STATS_KEY, e)
            return GameStats()

    @staticmethod
    def save_stats(stats: GameStats):
        GameStore._write(STATS_KEY, stats.to_dict())

"""
Copy usage statistics: total copies, last copy time and per-day counters.
"""

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional


class UsageTracker:
    """
    Records successful copies in the same SQLite file as the locator store.
    Daily counters older than the retention window are pruned on every write.
    """

    def __init__(self, db_path: str = "data/textgrab.db", retention_days: int = 30):
        self.db_path = db_path
        self.retention_days = retention_days
        self.logger = logging.getLogger(__name__)

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS usage_totals (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                total_copies INTEGER NOT NULL DEFAULT 0,
                last_copy_time TEXT
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS usage_daily (
                day TEXT PRIMARY KEY,
                copies INTEGER NOT NULL DEFAULT 0
            )
        """)
        cursor.execute("INSERT OR IGNORE INTO usage_totals (id, total_copies) VALUES (1, 0)")

        conn.commit()
        conn.close()

    def record_copy(self, text_length: int, now: Optional[datetime] = None) -> None:
        """
        Record one successful copy.

        Args:
            text_length: Length of the copied payload
            now: Time of the copy (defaults to the current UTC time)
        """
        now = now or datetime.now(timezone.utc)
        today = now.date().isoformat()
        cutoff = (now - timedelta(days=self.retention_days)).date().isoformat()

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("""
            UPDATE usage_totals
            SET total_copies = total_copies + 1, last_copy_time = ?
            WHERE id = 1
        """, (now.isoformat(),))
        cursor.execute("""
            INSERT INTO usage_daily (day, copies) VALUES (?, 1)
            ON CONFLICT(day) DO UPDATE SET copies = copies + 1
        """, (today,))
        cursor.execute("DELETE FROM usage_daily WHERE day < ?", (cutoff,))
        conn.commit()
        conn.close()

        self.logger.debug(f"Recorded copy of {text_length} characters on {today}")

    def get_stats(self) -> dict:
        """
        Get usage statistics.

        Returns:
            Dictionary with total_copies, last_copy_time and daily_usage
        """
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT total_copies, last_copy_time FROM usage_totals WHERE id = 1")
        total_copies, last_copy_time = cursor.fetchone()
        cursor.execute("SELECT day, copies FROM usage_daily ORDER BY day")
        daily_usage = {day: copies for day, copies in cursor.fetchall()}
        conn.close()

        return {
            "total_copies": total_copies,
            "last_copy_time": last_copy_time,
            "daily_usage": daily_usage,
        }

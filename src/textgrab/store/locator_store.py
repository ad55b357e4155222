"""
Persistent store for the most recent locator of each scope.
Uses a SQLite backend so selections survive restarts; entries expire after a
fixed retention horizon.
"""

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from ..locator.models import Locator

DEFAULT_TTL_SECONDS = 604800  # 7 days


def scope_for_url(url: str) -> str:
    """Scope key for a document URL: its lower-cased host."""
    if not url:
        return ""
    parsed = urlparse(url if "//" in url else f"//{url}")
    return (parsed.hostname or url).lower()


class LocatorStore:
    """
    SQLite-backed locator store, one slot per scope (last write wins).
    Expired entries are treated as absent on read and can be evicted eagerly.
    """

    def __init__(self, db_path: str = "data/textgrab.db", ttl_seconds: int = DEFAULT_TTL_SECONDS):
        """
        Initialize the locator store.

        Args:
            db_path: Path to SQLite database file
            ttl_seconds: Retention horizon in seconds (default: 7 days)
        """
        self.db_path = db_path
        self.ttl_seconds = ttl_seconds
        self.logger = logging.getLogger(__name__)

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_db()
        self.logger.info(f"LocatorStore initialized: db_path={db_path}, ttl={ttl_seconds}s")

    def _init_db(self):
        """Create the locator table if it doesn't exist."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS locators (
                scope TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                created_at REAL NOT NULL
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_locators_created_at ON locators(created_at)
        """)

        conn.commit()
        conn.close()

    def _is_expired(self, created_at: float, now: float) -> bool:
        return created_at < now - self.ttl_seconds

    def put(self, scope: str, locator: Locator) -> None:
        """
        Store ``locator`` as the selection for ``scope``, replacing any prior one.

        Args:
            scope: Domain the locator belongs to
            locator: Locator to persist
        """
        if locator.scope != scope:
            locator = Locator.from_dict({**locator.to_dict(), "scope": scope})
        payload = json.dumps(locator.to_dict())

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("""
            INSERT OR REPLACE INTO locators (scope, payload, created_at)
            VALUES (?, ?, ?)
        """, (scope, payload, locator.created_at))
        conn.commit()
        conn.close()

        self.logger.debug(f"Stored locator for scope '{scope}': {locator.selector}")

    def get(self, scope: str, now: Optional[float] = None) -> Optional[Locator]:
        """
        Get the stored locator for ``scope``.

        Returns:
            The locator, or None if missing, unreadable or older than the horizon
        """
        current_time = time.time() if now is None else now

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT payload, created_at FROM locators WHERE scope = ?", (scope,))
        row = cursor.fetchone()
        conn.close()

        if not row:
            self.logger.debug(f"No stored locator for scope '{scope}'")
            return None

        payload, created_at = row
        if self._is_expired(created_at, current_time):
            self.logger.info(f"Stored locator for scope '{scope}' has expired")
            return None

        try:
            return Locator.from_dict(json.loads(payload))
        except (ValueError, KeyError, TypeError) as e:
            self.logger.error(f"Unreadable locator record for scope '{scope}': {e}")
            return None

    def delete(self, scope: str) -> bool:
        """Remove the locator for ``scope``. Returns True if one was stored."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("DELETE FROM locators WHERE scope = ?", (scope,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        """
        Remove expired locators.

        Returns:
            Number of entries removed
        """
        current_time = time.time() if now is None else now

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM locators WHERE created_at < ?",
            (current_time - self.ttl_seconds,),
        )
        deleted_count = cursor.rowcount
        conn.commit()
        conn.close()

        if deleted_count > 0:
            self.logger.info(f"Cleaned up {deleted_count} expired locators")

        return deleted_count

    def clear(self) -> None:
        """Remove every stored locator."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("DELETE FROM locators")
        conn.commit()
        conn.close()

        self.logger.info("Locator store cleared")

    def get_stats(self, now: Optional[float] = None) -> dict:
        """
        Get store statistics.

        Returns:
            Dictionary with entry counts and the retention horizon
        """
        current_time = time.time() if now is None else now

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM locators")
        total_count = cursor.fetchone()[0]
        cursor.execute(
            "SELECT COUNT(*) FROM locators WHERE created_at >= ?",
            (current_time - self.ttl_seconds,),
        )
        valid_count = cursor.fetchone()[0]
        conn.close()

        return {
            "total_entries": total_count,
            "valid_entries": valid_count,
            "expired_entries": total_count - valid_count,
            "ttl_seconds": self.ttl_seconds,
        }

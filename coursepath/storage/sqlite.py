"""
SqliteStore - Durable key-value storage in ~/.coursepath/progress.db.

Every process (Streamlit session, CLI run) opens its own SqliteStore on the
same file. Each key carries a revision counter and the id of the view that
last wrote it, so poll() can report changes made by other views without
echoing a view's own writes back to it.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from coursepath.config import get_progress_db_path
from coursepath.errors import StorageError

from .base import ChangeCallback, Subscription, SubscriberRegistry

logger = logging.getLogger(__name__)


class SqliteStore(SubscriberRegistry):
    """
    Key-value store backed by a SQLite file.

    Writes are whole-value replacements; the last writer wins. Change
    detection is pull-based: callers invoke poll() from their own event
    loop, so no background thread is involved.
    """

    def __init__(self, db_path: Optional[Path] = None, view_id: Optional[str] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the database (default: COURSEPATH_DB or ~/.coursepath/progress.db)
            view_id: Identifier of the owning view (default: random)

        Raises:
            StorageError: If the database file exists but is not usable
        """
        super().__init__(view_id)
        self.db_path = Path(db_path) if db_path else get_progress_db_path()
        self._seen_revisions: dict[str, int] = {}
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    revision INTEGER NOT NULL DEFAULT 0,
                    writer TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)
            conn.commit()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection for one operation and close it afterwards.

        Raises:
            StorageError: If the database file is damaged or unusable
        """
        conn = self._get_connection()
        try:
            yield conn
        except sqlite3.DatabaseError as e:
            raise StorageError(f"Progress database {self.db_path} is unusable: {e}") from e
        finally:
            conn.close()

    def _read_revision(self, conn: sqlite3.Connection, key: str) -> tuple[int, Optional[str]]:
        """Return (revision, writer) for key, (0, None) if never written."""
        row = conn.execute(
            "SELECT revision, writer FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if not row:
            return 0, None
        return row["revision"], row["writer"]

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None

    def set(self, key: str, value: Optional[str]):
        """Replace the value of key. Unchanged values do not bump the revision."""
        now = datetime.now().isoformat()
        with self._connection() as conn:
            with conn:
                if value is None:
                    # Clearing a key that holds nothing is not a change
                    conn.execute(
                        """UPDATE kv_store
                           SET value = NULL, revision = revision + 1, writer = ?, updated_at = ?
                           WHERE key = ? AND value IS NOT NULL""",
                        (self.view_id, now, key)
                    )
                else:
                    conn.execute(
                        """INSERT INTO kv_store (key, value, revision, writer, updated_at)
                           VALUES (?, ?, 1, ?, ?)
                           ON CONFLICT(key) DO UPDATE SET
                             value = excluded.value,
                             revision = kv_store.revision + 1,
                             writer = excluded.writer,
                             updated_at = excluded.updated_at
                           WHERE kv_store.value IS NOT excluded.value""",
                        (key, value, self.view_id, now)
                    )
            revision, writer = self._read_revision(conn, key)

        if key in self._seen_revisions and writer == self.view_id:
            self._seen_revisions[key] = revision

    def delete(self, key: str):
        """Clear key; other views observe it like any other change."""
        self.set(key, None)

    def close(self):
        """Drop this view's subscriptions and revision bookkeeping."""
        super().close()
        self._seen_revisions.clear()

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def subscribe(self, key: str, callback: ChangeCallback) -> Subscription:
        if key not in self._seen_revisions:
            try:
                with self._connection() as conn:
                    self._seen_revisions[key], _ = self._read_revision(conn, key)
            except StorageError as e:
                logger.warning(f"Subscribing to '{key}' without a baseline revision: {e}")
                self._seen_revisions[key] = 0
        return super().subscribe(key, callback)

    def _remove(self, subscription: Subscription):
        super()._remove(subscription)
        if subscription.key not in self._subscriptions:
            self._seen_revisions.pop(subscription.key, None)

    def poll(self) -> int:
        """
        Deliver changes written by other views since the last poll.

        Returns:
            Number of callbacks invoked

        Raises:
            StorageError: If the database cannot be read
        """
        keys = self.subscribed_keys()
        if not keys:
            return 0

        with self._connection() as conn:
            changes = [(key, *self._read_revision(conn, key)) for key in keys]

        delivered = 0
        for key, revision, writer in changes:
            if revision == self._seen_revisions.get(key):
                continue
            self._seen_revisions[key] = revision
            if writer == self.view_id:
                continue
            logger.debug(f"Key '{key}' changed by view {writer} (revision {revision})")
            delivered += self._notify(key)
        return delivered

"""
ProgressStore - Track completed chapters in a shared key-value store.

Stores the completion record as one JSON array under a single key:
- Whole-record writes only (no deltas)
- Last write wins between views
- Corrupt values are discarded and replaced by an empty record
"""

import logging
from typing import Optional

from coursepath.config import STORAGE_KEY
from coursepath.errors import CorruptPersistedState, StorageError
from coursepath.schemas import CompletionRecord
from coursepath.storage import KeyValueStore, SqliteStore

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Own the completion record for one view.

    The record is read lazily on first access and cached; toggle() persists
    synchronously before returning. Other views learn about the write from
    the storage medium's change notification (see ViewSession).
    """

    def __init__(self, storage: Optional[KeyValueStore] = None, key: str = STORAGE_KEY):
        """
        Initialize progress store.

        Args:
            storage: Key-value store for this view (default: SqliteStore on the configured path)
            key: Storage key holding the record
        """
        self.storage = storage if storage is not None else SqliteStore()
        self.key = key
        self._record: Optional[CompletionRecord] = None

    @property
    def record(self) -> CompletionRecord:
        """Current record, loading it on first access."""
        if self._record is None:
            self._record = self.load()
        return self._record

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> CompletionRecord:
        """
        Reconstruct the record from storage.

        Missing storage yields an empty record. A corrupt value is removed
        from storage, logged, and replaced by an empty record. An unreadable
        storage medium is logged and also yields an empty record; this
        method never raises for bad data.
        """
        try:
            raw = self.storage.get(self.key)
        except StorageError as e:
            logger.warning(f"Progress storage unreadable, starting empty: {e}")
            self._record = CompletionRecord()
            return self._record

        try:
            record = CompletionRecord.from_json(raw)
        except CorruptPersistedState as e:
            logger.warning(f"Discarding corrupt progress under '{self.key}': {e}")
            self.storage.delete(self.key)
            record = CompletionRecord()
        self._record = record
        return record

    def refresh(self) -> CompletionRecord:
        """Re-read after another view changed the record."""
        return self.load()

    def _save(self, record: CompletionRecord):
        self.storage.set(self.key, record.to_json())
        self._record = record

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_complete(self, chapter_id: str) -> bool:
        """Check if a chapter is marked complete."""
        return chapter_id in self.record

    def count(self) -> int:
        """Number of completed chapters."""
        return len(self.record.chapter_ids)

    def completed_ids(self) -> set[str]:
        """Get set of completed chapter IDs."""
        return set(self.record.chapter_ids)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def toggle(self, chapter_id: str) -> CompletionRecord:
        """
        Flip a chapter's completion and persist the whole record.

        The read is taken fresh from storage so a toggle never writes back
        a stale copy of this view's cache.

        Returns:
            The updated record, for immediate re-render

        Raises:
            StorageError: If the record cannot be written
        """
        record = self.load().toggled(chapter_id)
        self._save(record)
        logger.debug(
            f"Chapter {chapter_id} marked {'complete' if chapter_id in record else 'incomplete'}"
        )
        return record

    def reset(self) -> CompletionRecord:
        """Clear all progress (explicit user action)."""
        record = CompletionRecord()
        self._save(record)
        logger.info("Progress reset")
        return record

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def completion_stats(self, total_chapters: int) -> dict:
        """
        Get completion statistics.

        Args:
            total_chapters: Total number of chapters in the catalog

        Returns:
            Dictionary with completion stats
        """
        completed = self.count()
        return {
            "total_chapters": total_chapters,
            "completed": completed,
            "remaining": max(total_chapters - completed, 0),
            "completion_percent": round(completed / total_chapters * 100, 1) if total_chapters > 0 else 0,
        }

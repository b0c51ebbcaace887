"""
SyncBridge - Keep every open view's completion state consistent.

Each view owns a ViewSession. The session subscribes to the progress key
when mounted; a write from another view triggers a reload and the view's
on_change callback. The view that performs a toggle updates itself
directly and is never notified of its own write.

Lifecycle: UNINITIALIZED -> LOADED (self-loop on toggle or foreign change)
-> UNMOUNTED (terminal).
"""

import logging
from enum import Enum
from typing import Callable, Optional

from coursepath.errors import SessionClosed
from coursepath.schemas import CompletionRecord
from coursepath.storage import Subscription

from .progress import ProgressStore

logger = logging.getLogger(__name__)


class ViewState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    UNMOUNTED = "unmounted"


class ViewSession:
    """One open view of the course and its live completion record."""

    def __init__(
        self,
        progress: ProgressStore,
        on_change: Optional[Callable[[CompletionRecord], None]] = None,
    ):
        """
        Args:
            progress: ProgressStore bound to this view's storage handle
            on_change: Called with the reloaded record after a foreign change
        """
        self.progress = progress
        self.on_change = on_change
        self.state = ViewState.UNINITIALIZED
        self._subscription: Optional[Subscription] = None

    @property
    def view_id(self) -> str:
        return self.progress.storage.view_id

    @property
    def record(self) -> CompletionRecord:
        self._ensure_loaded()
        return self.progress.record

    def _ensure_loaded(self):
        if self.state == ViewState.UNMOUNTED:
            raise SessionClosed(f"View {self.view_id} is unmounted")
        if self.state == ViewState.UNINITIALIZED:
            self.mount()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def mount(self) -> CompletionRecord:
        """Load the record and start listening for foreign changes."""
        if self.state == ViewState.UNMOUNTED:
            raise SessionClosed(f"View {self.view_id} is unmounted")
        if self.state == ViewState.LOADED:
            return self.progress.record

        record = self.progress.load()
        self._subscription = self.progress.storage.subscribe(self.progress.key, self._handle_change)
        self.state = ViewState.LOADED
        logger.debug(f"View {self.view_id} mounted with {len(record.chapter_ids)} completed chapters")
        return record

    def unmount(self):
        """
        Stop listening and close the storage handle.

        The session owns its handle; it cannot be used afterwards.
        """
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.progress.storage.close()
        self.state = ViewState.UNMOUNTED
        logger.debug(f"View {self.view_id} unmounted")

    def __enter__(self) -> "ViewSession":
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unmount()

    # -------------------------------------------------------------------------
    # Queries and actions
    # -------------------------------------------------------------------------

    def is_complete(self, chapter_id: str) -> bool:
        self._ensure_loaded()
        return self.progress.is_complete(chapter_id)

    def count(self) -> int:
        self._ensure_loaded()
        return self.progress.count()

    def toggle(self, chapter_id: str) -> CompletionRecord:
        """Toggle and update this view immediately (no self-notification)."""
        self._ensure_loaded()
        return self.progress.toggle(chapter_id)

    def reset(self) -> CompletionRecord:
        self._ensure_loaded()
        return self.progress.reset()

    def poll(self) -> bool:
        """
        Ask the storage backend for pending foreign changes.

        Returns:
            True if at least one change was delivered to this view
        """
        self._ensure_loaded()
        return self.progress.storage.poll() > 0

    # -------------------------------------------------------------------------
    # Notification
    # -------------------------------------------------------------------------

    def _handle_change(self, key: str):
        if self.state != ViewState.LOADED:
            return
        record = self.progress.refresh()
        logger.debug(f"View {self.view_id} reloaded '{key}': {len(record.chapter_ids)} completed chapters")
        if self.on_change is not None:
            self.on_change(record)

"""
In-memory storage with manual fan-out.

MemoryBackend holds the values; each MemoryStore opened on it is one view.
Writes notify every other open view synchronously.
"""

from typing import Optional

from .base import SubscriberRegistry


class MemoryBackend:
    """Shared values plus the list of views attached to them."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})
        self._views: list["MemoryStore"] = []

    def open_view(self, view_id: Optional[str] = None) -> "MemoryStore":
        """Attach a new view (tab, window, session) to these values."""
        view = MemoryStore(self, view_id)
        self._views.append(view)
        return view

    def close_view(self, view: "MemoryStore"):
        if view in self._views:
            self._views.remove(view)

    def _write(self, origin: "MemoryStore", key: str, value: Optional[str]):
        if self._values.get(key) == value:
            return
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value

        for view in list(self._views):
            if view is not origin:
                view._notify(key)


class MemoryStore(SubscriberRegistry):
    """One view's handle on a MemoryBackend."""

    def __init__(self, backend: MemoryBackend, view_id: Optional[str] = None):
        super().__init__(view_id)
        self.backend = backend

    def get(self, key: str) -> Optional[str]:
        return self.backend._values.get(key)

    def set(self, key: str, value: str):
        self.backend._write(self, key, value)

    def delete(self, key: str):
        self.backend._write(self, key, None)

    def close(self):
        """Detach from the backend; no further notifications arrive."""
        super().close()
        self.backend.close_view(self)

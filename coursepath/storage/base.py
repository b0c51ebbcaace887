"""
Key-value storage seam shared by every open view.

A store handle belongs to exactly one view. Change callbacks fire for
writes made through *other* handles only, mirroring browser storage
events, which never reach the tab that performed the write.
"""

import logging
import uuid
from typing import Callable, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop delivery."""

    def __init__(self, key: str, callback: ChangeCallback, registry: "SubscriberRegistry"):
        self.key = key
        self.callback = callback
        self._registry = registry
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._registry._remove(self)


@runtime_checkable
class KeyValueStore(Protocol):
    """Storage interface used by ProgressStore and view sessions."""

    view_id: str

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def subscribe(self, key: str, callback: ChangeCallback) -> Subscription: ...

    def poll(self) -> int: ...

    def close(self) -> None: ...


class SubscriberRegistry:
    """Callback bookkeeping shared by the concrete stores."""

    def __init__(self, view_id: Optional[str] = None):
        self.view_id = view_id or uuid.uuid4().hex
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, key: str, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(key, callback, self)
        self._subscriptions.setdefault(key, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription):
        listeners = self._subscriptions.get(subscription.key, [])
        if subscription in listeners:
            listeners.remove(subscription)
        if not listeners:
            self._subscriptions.pop(subscription.key, None)

    def subscribed_keys(self) -> list[str]:
        return list(self._subscriptions)

    def _notify(self, key: str) -> int:
        """
        Deliver a change of key to this view's listeners.

        A failing listener is logged and does not stop delivery to the rest.

        Returns:
            Number of callbacks invoked
        """
        delivered = 0
        for subscription in list(self._subscriptions.get(key, [])):
            if not subscription.active:
                continue
            try:
                subscription.callback(key)
            except Exception:
                logger.exception(f"Change listener for '{key}' failed in view {self.view_id}")
            delivered += 1
        return delivered

    def poll(self) -> int:
        """Push-style stores deliver on write; nothing is pending."""
        return 0

    def close(self):
        """Drop every subscription held by this view."""
        for listeners in list(self._subscriptions.values()):
            for subscription in list(listeners):
                subscription.active = False
        self._subscriptions.clear()

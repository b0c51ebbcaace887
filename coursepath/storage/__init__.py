"""
CoursePath Storage - Key-value backends shared between open views.

This module provides:
- KeyValueStore: the get/set/subscribe interface
- MemoryBackend / MemoryStore: in-process values with manual fan-out
- SqliteStore: durable file storage with revision-based change polling
"""

from .base import (
    ChangeCallback,
    KeyValueStore,
    Subscription,
    SubscriberRegistry,
)

from .memory import (
    MemoryBackend,
    MemoryStore,
)

from .sqlite import (
    SqliteStore,
)

__all__ = [
    # Base
    "ChangeCallback",
    "KeyValueStore",
    "Subscription",
    "SubscriberRegistry",
    # Memory
    "MemoryBackend",
    "MemoryStore",
    # SQLite
    "SqliteStore",
]

"""
CoursePath Classroom - Runtime components for navigating the course.

This module provides:
- CourseCatalog: Ordered, read-only course structure
- load_catalog: Build a catalog from YAML
- ProgressStore: Durable completion record
- ViewSession: Cross-view synchronization
- Navigator: Sidebar and chapter-page read models
"""

from .catalog import (
    CourseCatalog,
)

from .loader import (
    catalog_from_dict,
    load_catalog,
    load_default_catalog,
)

from .progress import (
    ProgressStore,
)

from .sync import (
    ViewSession,
    ViewState,
)

from .navigator import (
    Navigator,
    NavigationChapter,
    NavigationPart,
    ChapterView,
)

__all__ = [
    # Catalog
    "CourseCatalog",
    # Loader
    "catalog_from_dict",
    "load_catalog",
    "load_default_catalog",
    # Progress
    "ProgressStore",
    # Sync
    "ViewSession",
    "ViewState",
    # Navigator
    "Navigator",
    "NavigationChapter",
    "NavigationPart",
    "ChapterView",
]

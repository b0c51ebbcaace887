"""
Exceptions raised by the CoursePath engine.

Lookup misses are recovered by the caller, corrupt persisted state is
recovered inside ProgressStore.load, unreadable storage degrades to an
empty record on load, and catalog errors halt startup.
"""


class CoursePathError(Exception):
    """Base class for all CoursePath errors."""


class NotFound(CoursePathError, LookupError):
    """A catalog lookup (slug, id, section or route) did not match."""


class CorruptPersistedState(CoursePathError, ValueError):
    """The stored completion record could not be decoded."""


class CatalogError(CoursePathError, ValueError):
    """The course catalog violates a construction-time invariant."""


class DuplicateUnitIdentifier(CatalogError):
    pass


class DuplicateSlug(CatalogError):
    pass


class DuplicateSequence(CatalogError):
    """Two parts, or two chapters, share a sequence number."""


class SessionClosed(CoursePathError, RuntimeError):
    """A view session was used after it was unmounted."""


class StorageError(CoursePathError):
    """The storage medium itself could not be read or written."""

"""
CoursePath - Course navigation and progress tracking.

Ordered chapter catalog, durable completion record, and cross-view
synchronization for a static course site.
"""

__version__ = "0.1.0"

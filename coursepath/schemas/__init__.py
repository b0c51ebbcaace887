"""
CoursePath Schemas - Pydantic models for the course engine.

This module exports all schema classes for:
- Catalog: chapters, parts, course stats, catalog documents
- Progress: the persisted completion record
"""

# Catalog schemas
from .catalog import (
    SLUG_PATTERN,
    PartStatus,
    Chapter,
    CoursePart,
    CourseStats,
    CatalogDocument,
)

# Progress schemas
from .progress import (
    CompletionRecord,
)

__all__ = [
    # Catalog
    'SLUG_PATTERN',
    'PartStatus',
    'Chapter',
    'CoursePart',
    'CourseStats',
    'CatalogDocument',
    # Progress
    'CompletionRecord',
]

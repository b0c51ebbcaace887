"""
Catalog schemas for CoursePath.

Defines Pydantic models for the static course structure:
- Chapters (units): the smallest navigable item
- Course parts (sections): ordered groups of chapters
- Course stats shown on overview pages
- The catalog document as read from YAML
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Lowercase words joined by single hyphens, e.g. "use-effect"
SLUG_PATTERN = r'^[a-z0-9]+(?:-[a-z0-9]+)*$'


class PartStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    COMING_SOON = "coming-soon"


class Chapter(BaseModel):
    """One content chapter. Immutable once defined."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    number: int = Field(..., ge=1)     # unique across the catalog
    title: str
    slug: str = Field(..., pattern=SLUG_PATTERN)
    path: Optional[str] = None         # prose location, read by the renderer only
    is_new: bool = False


class CoursePart(BaseModel):
    """An ordered, non-empty group of chapters."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    number: int = Field(..., ge=1)
    title: str
    description: str = ""
    status: PartStatus = PartStatus.COMPLETED
    chapters: tuple[Chapter, ...] = Field(..., min_length=1)

    @field_validator('chapters')
    @classmethod
    def chapters_in_order(cls, v):
        return tuple(sorted(v, key=lambda chapter: chapter.number))


class CourseStats(BaseModel):
    """Headline numbers for the course overview."""
    model_config = ConfigDict(frozen=True)

    total_chapters: int = Field(0, ge=0)
    total_parts: int = Field(0, ge=0)
    code_examples: int = Field(0, ge=0)
    content_lines: int = Field(0, ge=0)
    estimated_hours: str = ""


class CatalogDocument(BaseModel):
    """Top-level shape of a catalog YAML file."""
    title: str = "Course"
    parts: list[CoursePart] = Field(..., min_length=1)
    stats: Optional[CourseStats] = None

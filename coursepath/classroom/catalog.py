"""
CourseCatalog - Immutable, ordered course structure.

Provides:
- Global chapter order (part number, then chapter number)
- Slug/id lookup and next/previous resolution
- Part resolution and route validation
"""

import logging
import re
from typing import Iterable, Optional, Union

from coursepath.errors import (
    DuplicateSequence,
    DuplicateSlug,
    DuplicateUnitIdentifier,
    NotFound,
)
from coursepath.schemas import Chapter, CoursePart, CourseStats

logger = logging.getLogger(__name__)

PART_TOKEN_PATTERN = re.compile(r'^part(\d+)$')


class CourseCatalog:
    """
    Read-only catalog of course parts and chapters.

    The order is computed once at construction and every query is a
    positional lookup over it. Invariant violations (duplicate ids, slugs
    or sequence numbers) raise a CatalogError subclass immediately.
    """

    def __init__(
        self,
        parts: Iterable[CoursePart],
        stats: Optional[CourseStats] = None,
        title: str = "Course",
    ):
        """
        Build the catalog.

        Args:
            parts: Course parts in any order
            stats: Optional headline numbers; derived from the parts if omitted
            title: Course title for display
        """
        self.title = title
        self._parts: tuple[CoursePart, ...] = tuple(sorted(parts, key=lambda part: part.number))
        self._validate()

        self._order: list[Chapter] = [
            chapter for part in self._parts for chapter in part.chapters
        ]
        self._index_by_slug: dict[str, int] = {
            chapter.slug: idx for idx, chapter in enumerate(self._order)
        }
        self._by_id: dict[str, Chapter] = {chapter.id: chapter for chapter in self._order}
        self._part_by_chapter_id: dict[str, CoursePart] = {
            chapter.id: part for part in self._parts for chapter in part.chapters
        }
        self._part_by_number: dict[int, CoursePart] = {part.number: part for part in self._parts}

        self._stats = stats or CourseStats()
        if not self._stats.total_chapters and not self._stats.total_parts:
            self._stats = self._stats.model_copy(update={
                "total_chapters": len(self._order),
                "total_parts": len(self._parts),
            })

        logger.debug(f"Catalog '{title}' built: {len(self._parts)} parts, {len(self._order)} chapters")

    def _validate(self):
        """Reject catalogs whose order or lookups would be ambiguous."""
        part_numbers: set[int] = set()
        chapter_numbers: dict[int, str] = {}
        ids: set[str] = set()
        slugs: dict[str, str] = {}

        for part in self._parts:
            if part.number in part_numbers:
                raise DuplicateSequence(f"Duplicate part number: {part.number}")
            part_numbers.add(part.number)

            for chapter in part.chapters:
                if chapter.id in ids:
                    raise DuplicateUnitIdentifier(f"Duplicate chapter id: {chapter.id}")
                ids.add(chapter.id)

                if chapter.slug in slugs:
                    raise DuplicateSlug(
                        f"Duplicate slug: {chapter.slug} (in {slugs[chapter.slug]} and {chapter.id})"
                    )
                slugs[chapter.slug] = chapter.id

                if chapter.number in chapter_numbers:
                    raise DuplicateSequence(
                        f"Duplicate chapter number {chapter.number} "
                        f"(in {chapter_numbers[chapter.number]} and {chapter.id})"
                    )
                chapter_numbers[chapter.number] = chapter.id

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, slug: object) -> bool:
        return slug in self._index_by_slug

    @property
    def stats(self) -> CourseStats:
        return self._stats

    # -------------------------------------------------------------------------
    # Ordered access
    # -------------------------------------------------------------------------

    def all_units(self) -> list[Chapter]:
        """All chapters in global order."""
        return list(self._order)

    def sections(self) -> list[CoursePart]:
        """All parts ordered by number."""
        return list(self._parts)

    def first_unit(self) -> Optional[Chapter]:
        return self._order[0] if self._order else None

    def position_of(self, slug: str) -> tuple[int, int]:
        """
        Get chapter position as (current, total), 1-based.

        Returns (0, total) if the slug is unknown.
        """
        if slug not in self._index_by_slug:
            return (0, len(self._order))
        return (self._index_by_slug[slug] + 1, len(self._order))

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_by_slug(self, slug: str) -> Chapter:
        """
        Look up a chapter by its slug.

        Raises:
            NotFound: If no chapter has that slug
        """
        idx = self._index_by_slug.get(slug)
        if idx is None:
            raise NotFound(f"Chapter not found: {slug}")
        return self._order[idx]

    def find_by_id(self, chapter_id: str) -> Chapter:
        chapter = self._by_id.get(chapter_id)
        if chapter is None:
            raise NotFound(f"Chapter id not found: {chapter_id}")
        return chapter

    def section_by_number(self, number: int) -> CoursePart:
        part = self._part_by_number.get(number)
        if part is None:
            raise NotFound(f"Part not found: {number}")
        return part

    def section_of(self, unit: Union[Chapter, str]) -> CoursePart:
        """
        Resolve the part that owns a chapter.

        Args:
            unit: Chapter or chapter id

        Raises:
            NotFound: If the chapter does not belong to this catalog
        """
        chapter_id = unit.id if isinstance(unit, Chapter) else unit
        part = self._part_by_chapter_id.get(chapter_id)
        if part is None:
            raise NotFound(f"Chapter not in catalog: {chapter_id}")
        if isinstance(unit, Chapter) and self._by_id[chapter_id] != unit:
            raise NotFound(f"Chapter not in catalog: {chapter_id}")
        return part

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def next_unit(self, slug: str) -> Optional[Chapter]:
        """Chapter after slug, or None if slug is last or unknown."""
        idx = self._index_by_slug.get(slug)
        if idx is None or idx + 1 >= len(self._order):
            return None
        return self._order[idx + 1]

    def previous_unit(self, slug: str) -> Optional[Chapter]:
        """Chapter before slug, or None if slug is first or unknown."""
        idx = self._index_by_slug.get(slug)
        if idx is None or idx <= 0:
            return None
        return self._order[idx - 1]

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def resolve_route(self, section_number: int, slug: str) -> Chapter:
        """
        Validate an external (part number, slug) route.

        A slug that exists but lives in another part is treated as missing,
        so stale or hand-edited links never show the wrong navigation.

        Raises:
            NotFound: If the slug is unknown or belongs to another part
        """
        chapter = self.find_by_slug(slug)
        if self.section_of(chapter).number != section_number:
            raise NotFound(f"Chapter {slug} is not in part {section_number}")
        return chapter

    def route_for(self, unit: Chapter) -> str:
        """URL path for a chapter, e.g. /course/part2/props."""
        return f"/course/part{self.section_of(unit).number}/{unit.slug}"

    @staticmethod
    def parse_part_token(token: str) -> int:
        """
        Parse a route segment such as "part3" into a part number.

        Raises:
            NotFound: If the token is malformed
        """
        match = PART_TOKEN_PATTERN.match(token)
        if not match:
            raise NotFound(f"Invalid part segment: {token}")
        return int(match.group(1))

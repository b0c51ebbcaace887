"""
Navigator - Chapter sequencing and completion views for the UI.

Provides:
- Sidebar tree with per-part completion counts
- Status indicators
- Chapter view resolution from (part, slug) routes
- Progress summary
"""

from dataclasses import dataclass
from typing import Optional

from coursepath.schemas import Chapter, CoursePart

from .catalog import CourseCatalog
from .progress import ProgressStore


@dataclass
class NavigationChapter:
    """Chapter with navigation metadata."""
    chapter: Chapter
    route: str
    is_complete: bool
    is_current: bool


@dataclass
class NavigationPart:
    """Part with chapters and navigation metadata."""
    part: CoursePart
    chapters: list[NavigationChapter]
    completed_count: int
    total_count: int


@dataclass
class ChapterView:
    """Everything a chapter page needs besides the prose itself."""
    chapter: Chapter
    part: CoursePart
    previous: Optional[Chapter]
    next: Optional[Chapter]
    position: int
    total: int
    is_complete: bool


class Navigator:
    """
    Navigate through the course.

    Combines CourseCatalog (structure) with ProgressStore (user state).
    """

    def __init__(self, catalog: CourseCatalog, progress: ProgressStore):
        self.catalog = catalog
        self.progress = progress

    @property
    def total_chapters(self) -> int:
        return len(self.catalog)

    # -------------------------------------------------------------------------
    # Chapter pages
    # -------------------------------------------------------------------------

    def get_chapter_view(self, part_number: int, slug: str) -> ChapterView:
        """
        Resolve a route into a chapter page.

        Raises:
            NotFound: If the route does not name a chapter of that part
        """
        chapter = self.catalog.resolve_route(part_number, slug)
        position, total = self.catalog.position_of(slug)
        return ChapterView(
            chapter=chapter,
            part=self.catalog.section_of(chapter),
            previous=self.catalog.previous_unit(slug),
            next=self.catalog.next_unit(slug),
            position=position,
            total=total,
            is_complete=self.progress.is_complete(chapter.id),
        )

    def get_position(self, slug: str) -> tuple[int, int]:
        return self.catalog.position_of(slug)

    # -------------------------------------------------------------------------
    # Sidebar tree
    # -------------------------------------------------------------------------

    def get_navigation_tree(self, current_slug: Optional[str] = None) -> list[NavigationPart]:
        """
        Get the full course tree with completion metadata.

        Args:
            current_slug: Slug of the chapter being viewed, if any
        """
        completed = self.progress.completed_ids()

        tree = []
        for part in self.catalog.sections():
            nav_chapters = [
                NavigationChapter(
                    chapter=chapter,
                    route=self.catalog.route_for(chapter),
                    is_complete=chapter.id in completed,
                    is_current=chapter.slug == current_slug,
                )
                for chapter in part.chapters
            ]
            tree.append(NavigationPart(
                part=part,
                chapters=nav_chapters,
                completed_count=sum(1 for nav in nav_chapters if nav.is_complete),
                total_count=len(nav_chapters),
            ))
        return tree

    def get_status_indicator(self, chapter: Chapter, current_slug: Optional[str] = None) -> str:
        """
        Get status indicator for sidebar display.

        Returns:
            ✓ for completed
            → for current
            ○ otherwise
        """
        if self.progress.is_complete(chapter.id):
            return "✓"
        if chapter.slug == current_slug:
            return "→"
        return "○"

    def get_resume_chapter(self) -> Optional[Chapter]:
        """First chapter not yet completed, or the first chapter if all are done."""
        completed = self.progress.completed_ids()
        for chapter in self.catalog.all_units():
            if chapter.id not in completed:
                return chapter
        return self.catalog.first_unit()

    # -------------------------------------------------------------------------
    # Progress Summary
    # -------------------------------------------------------------------------

    def get_progress_summary(self) -> dict:
        """Get progress summary for display."""
        tree = self.get_navigation_tree()
        completed = sum(nav_part.completed_count for nav_part in tree)
        total = self.total_chapters

        return {
            "total_chapters": total,
            "completed": completed,
            "remaining": total - completed,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "parts": [
                {
                    "id": nav_part.part.id,
                    "number": nav_part.part.number,
                    "title": nav_part.part.title,
                    "completed": nav_part.completed_count,
                    "total": nav_part.total_count,
                }
                for nav_part in tree
            ],
        }

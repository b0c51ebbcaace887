"""
Command-line view of the course.

Each invocation is one short-lived view on the shared progress database,
so a toggle here shows up in any open Streamlit session on its next poll.

Usage:
    coursepath list
    coursepath show props --part 2
    coursepath next props
    coursepath toggle props
    coursepath status
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from coursepath.classroom import (
    CourseCatalog,
    Navigator,
    ProgressStore,
    ViewSession,
    load_default_catalog,
)
from coursepath.config import setup_logging
from coursepath.errors import CatalogError, NotFound, StorageError
from coursepath.schemas import Chapter
from coursepath.storage import SqliteStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coursepath",
        description="Browse the course and track completed chapters.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sidebar-style overview with completion marks
  coursepath list

  # Mark a chapter complete (run again to undo)
  coursepath toggle use-effect

  # Use a different catalog or progress file
  coursepath --catalog my_course.yaml --db /tmp/progress.db status
        """,
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog YAML file (default: COURSEPATH_CATALOG or bundled course)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Progress database (default: COURSEPATH_DB or ~/.coursepath/progress.db)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show all parts and chapters with completion marks")

    show = sub.add_parser("show", help="Show one chapter and its neighbours")
    show.add_argument("slug")
    show.add_argument("--part", type=int, default=None, help="Validate the chapter belongs to this part")

    for name, help_text in (("next", "Show the chapter after SLUG"), ("prev", "Show the chapter before SLUG")):
        nav = sub.add_parser(name, help=help_text)
        nav.add_argument("slug")

    toggle = sub.add_parser("toggle", help="Flip a chapter's completion")
    toggle.add_argument("chapter", help="Chapter slug or id")

    sub.add_parser("status", help="Show overall progress")

    reset = sub.add_parser("reset", help="Clear all progress")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


def _resolve_chapter(catalog: CourseCatalog, ref: str) -> Chapter:
    """Accept either a slug or a chapter id."""
    try:
        return catalog.find_by_slug(ref)
    except NotFound:
        return catalog.find_by_id(ref)


def _format_chapter(catalog: CourseCatalog, chapter: Chapter) -> str:
    return f"{chapter.id}  {chapter.title}  ({catalog.route_for(chapter)})"


def run(args: argparse.Namespace, catalog: CourseCatalog, session: ViewSession) -> int:
    """Execute one parsed command against an open view session."""
    navigator = Navigator(catalog, session.progress)

    if args.command == "list":
        for nav_part in navigator.get_navigation_tree():
            part = nav_part.part
            print(f"Part {part.number}: {part.title} ({nav_part.completed_count}/{nav_part.total_count})")
            for nav in nav_part.chapters:
                mark = navigator.get_status_indicator(nav.chapter)
                suffix = " [NEW]" if nav.chapter.is_new else ""
                print(f"  {mark} {nav.chapter.number:>2}. {nav.chapter.title}{suffix}")
        return 0

    if args.command == "show":
        part_number = args.part
        if part_number is None:
            part_number = catalog.section_of(catalog.find_by_slug(args.slug)).number
        view = navigator.get_chapter_view(part_number, args.slug)
        print(f"Part {view.part.number}: {view.part.title}")
        print(f"Chapter {view.position} of {view.total}: {view.chapter.title}")
        print(f"Status: {'completed' if view.is_complete else 'not completed'}")
        if view.previous:
            print(f"Previous: {_format_chapter(catalog, view.previous)}")
        if view.next:
            print(f"Next: {_format_chapter(catalog, view.next)}")
        return 0

    if args.command in ("next", "prev"):
        if args.slug not in catalog:
            raise NotFound(f"Chapter not found: {args.slug}")
        target = catalog.next_unit(args.slug) if args.command == "next" else catalog.previous_unit(args.slug)
        if target is None:
            print("No further chapter.")
        else:
            print(_format_chapter(catalog, target))
        return 0

    if args.command == "toggle":
        chapter = _resolve_chapter(catalog, args.chapter)
        record = session.toggle(chapter.id)
        state = "completed" if chapter.id in record else "not completed"
        print(f"{chapter.title}: {state} ({session.count()}/{len(catalog)})")
        return 0

    if args.command == "status":
        summary = navigator.get_progress_summary()
        print(
            f"Progress: {summary['completed']}/{summary['total_chapters']} chapters "
            f"({summary['completion_percent']}%)"
        )
        for part in summary["parts"]:
            print(f"  Part {part['number']}: {part['title']} {part['completed']}/{part['total']}")
        resume = navigator.get_resume_chapter()
        if resume is not None:
            print(f"Resume at: {_format_chapter(catalog, resume)}")
        return 0

    if args.command == "reset":
        if not args.yes:
            print("Refusing to reset without --yes.", file=sys.stderr)
            return 1
        session.reset()
        print("Progress cleared.")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else None)

    try:
        catalog = load_default_catalog(args.catalog)
    except (CatalogError, ValidationError, yaml.YAMLError, FileNotFoundError) as e:
        logger.error(f"Cannot load catalog: {e}")
        return 2

    try:
        session = ViewSession(ProgressStore(SqliteStore(args.db)))
    except StorageError as e:
        logger.error(f"Cannot open progress database: {e}")
        return 2

    try:
        session.mount()
        return run(args, catalog, session)
    except NotFound as e:
        print(f"Not found: {e}", file=sys.stderr)
        return 1
    except StorageError as e:
        logger.error(f"Progress not saved: {e}")
        return 1
    finally:
        session.unmount()


if __name__ == "__main__":
    sys.exit(main())

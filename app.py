"""
CoursePath - Course Reader

Streamlit application for reading the course chapter by chapter and
tracking which chapters are complete. Every browser tab is its own view;
completion changes made in one tab (or from the CLI) appear in the others.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from coursepath.classroom import (
    Navigator,
    ProgressStore,
    ViewSession,
    load_default_catalog,
)
from coursepath.config import setup_logging
from coursepath.errors import NotFound, StorageError
from coursepath.storage import SqliteStore


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

SYNC_INTERVAL = "2s"

setup_logging()
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="CoursePath",
    page_icon="📘",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_catalog():
    """Catalog is configuration: loaded once per server process."""
    return load_default_catalog()


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    catalog = get_catalog()

    if "view" not in st.session_state:
        session = ViewSession(ProgressStore(SqliteStore()))
        session.mount()
        st.session_state.view = session
        logger.info(f"Opened view {session.view_id}")

    if "navigator" not in st.session_state:
        st.session_state.navigator = Navigator(catalog, st.session_state.view.progress)


def current_route() -> tuple[int, str] | None:
    """Read (part number, slug) from the URL, None on the overview page."""
    params = st.query_params
    if "part" not in params or "slug" not in params:
        return None
    try:
        return get_catalog().parse_part_token(params["part"]), params["slug"]
    except NotFound:
        return -1, params["slug"]


def select_chapter(chapter):
    """Navigate to a chapter."""
    part = get_catalog().section_of(chapter)
    st.query_params["part"] = f"part{part.number}"
    st.query_params["slug"] = chapter.slug
    st.rerun()


# -----------------------------------------------------------------------------
# Cross-tab sync
# -----------------------------------------------------------------------------

@st.fragment(run_every=SYNC_INTERVAL)
def sync_with_other_views():
    """Pick up completion changes written by other tabs."""
    try:
        changed = st.session_state.view.poll()
    except StorageError as e:
        logger.warning(f"Skipping sync: {e}")
        return
    if changed:
        st.rerun(scope="app")


# -----------------------------------------------------------------------------
# Sidebar: Course Tree
# -----------------------------------------------------------------------------

def render_sidebar(current_slug: str | None):
    """Render the sidebar with course tree and progress."""
    nav = st.session_state.navigator
    catalog = get_catalog()

    st.sidebar.title(f"📘 {catalog.title}")

    stats = nav.get_progress_summary()
    st.sidebar.markdown(
        f"**Progress:** {stats['completed']} / {stats['total_chapters']} chapters completed"
    )
    st.sidebar.progress(stats['completion_percent'] / 100)

    if st.sidebar.button("Course overview", use_container_width=True):
        st.query_params.clear()
        st.rerun()

    st.sidebar.divider()

    for nav_part in nav.get_navigation_tree(current_slug):
        part = nav_part.part
        part_progress = f"({nav_part.completed_count}/{nav_part.total_count})"
        expanded = any(nav_chapter.is_current for nav_chapter in nav_part.chapters)
        with st.sidebar.expander(f"**Part {part.number}: {part.title}** {part_progress}", expanded=expanded):
            for nav_chapter in nav_part.chapters:
                chapter = nav_chapter.chapter
                indicator = nav.get_status_indicator(chapter, current_slug)
                label = f"{indicator} {chapter.number}. {chapter.title}"
                if st.button(
                    label[:40] + "..." if len(label) > 40 else label,
                    key=f"chapter_{chapter.id}",
                    type="primary" if nav_chapter.is_current else "secondary",
                    use_container_width=True,
                ):
                    select_chapter(chapter)


# -----------------------------------------------------------------------------
# Main Content: Overview
# -----------------------------------------------------------------------------

def render_overview():
    """Render the course overview with all parts."""
    catalog = get_catalog()
    view = st.session_state.view
    stats = catalog.stats

    st.title("Course Overview")

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Chapters", stats.total_chapters)
    col2.metric("Code Examples", f"{stats.code_examples}+")
    col3.metric("Hours of Content", stats.estimated_hours or "-")

    for part in catalog.sections():
        st.subheader(f"Part {part.number}: {part.title}")
        st.caption(f"{part.description} · {len(part.chapters)} chapters")
        for chapter in part.chapters:
            mark = "✓" if view.is_complete(chapter.id) else "○"
            badge = " · NEW" if chapter.is_new else ""
            if st.button(f"{mark} {chapter.number}. {chapter.title}{badge}", key=f"overview_{chapter.id}"):
                select_chapter(chapter)


# -----------------------------------------------------------------------------
# Main Content: Chapter View
# -----------------------------------------------------------------------------

def render_chapter_view(part_number: int, slug: str):
    """Render the navigation and completion controls for one chapter."""
    nav = st.session_state.navigator
    view = st.session_state.view

    try:
        chapter_view = nav.get_chapter_view(part_number, slug)
    except NotFound:
        st.error("Chapter not found.")
        st.info("The link may be outdated. Pick a chapter from the sidebar.")
        return

    chapter = chapter_view.chapter
    st.caption(f"Part {chapter_view.part.number}: {chapter_view.part.title}")
    st.title(chapter.title)

    render_navigation_bar(chapter_view)

    if chapter.path:
        st.markdown(f"Content: `{chapter.path}`")

    st.divider()

    if view.is_complete(chapter.id):
        clicked = st.button("Completed ✓ (mark as incomplete)", use_container_width=True)
    else:
        clicked = st.button("Mark as Complete", type="primary", use_container_width=True)
    if clicked:
        try:
            view.toggle(chapter.id)
        except StorageError as e:
            logger.error(f"Toggle of {chapter.id} failed: {e}")
            st.error("Progress could not be saved.")
        else:
            st.rerun()

    render_navigation_bar(chapter_view, key_suffix="bottom")


def render_navigation_bar(chapter_view, key_suffix: str = "top"):
    """Render navigation bar with prev/next buttons."""
    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if chapter_view.previous:
            if st.button("← Previous", key=f"prev_{key_suffix}", use_container_width=True):
                select_chapter(chapter_view.previous)

    with col2:
        st.markdown(
            f"<center>Chapter {chapter_view.position} of {chapter_view.total}</center>",
            unsafe_allow_html=True,
        )

    with col3:
        if chapter_view.next:
            if st.button("Next →", key=f"next_{key_suffix}", use_container_width=True):
                select_chapter(chapter_view.next)


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    try:
        init_session_state()
    except StorageError as e:
        logger.error(f"Cannot open progress database: {e}")
        st.error("Progress database is unreadable. Remove or repair it and reload.")
        st.stop()
    route = current_route()
    render_sidebar(route[1] if route else None)
    sync_with_other_views()

    if route is None:
        render_overview()
    else:
        render_chapter_view(*route)


if __name__ == "__main__":
    main()

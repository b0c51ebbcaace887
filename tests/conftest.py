"""Shared fixtures: a four-chapter catalog and fresh storage backends."""

import pytest

from coursepath.classroom import CourseCatalog
from coursepath.schemas import Chapter, CoursePart
from coursepath.storage import MemoryBackend, SqliteStore


def make_catalog() -> CourseCatalog:
    """Part 1 holds ch01-ch03, part 2 holds ch04."""
    return CourseCatalog(
        [
            CoursePart(
                id="part1",
                number=1,
                title="Foundations",
                description="Basics",
                chapters=[
                    Chapter(id="ch01", number=1, title="Intro", slug="intro"),
                    Chapter(id="ch02", number=2, title="Setup", slug="setup"),
                    Chapter(id="ch03", number=3, title="Components", slug="components"),
                ],
            ),
            CoursePart(
                id="part2",
                number=2,
                title="Core Concepts",
                description="Fundamentals",
                chapters=[
                    Chapter(id="ch04", number=4, title="Props", slug="props", is_new=True),
                ],
            ),
        ],
        title="Test Course",
    )


@pytest.fixture
def catalog() -> CourseCatalog:
    return make_catalog()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "progress.db"


@pytest.fixture
def sqlite_factory(db_path):
    """Open a new SqliteStore (a new view) on the shared test database."""
    def factory(view_id=None):
        return SqliteStore(db_path, view_id=view_id)
    return factory

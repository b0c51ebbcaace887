"""
Runtime configuration for CoursePath.

Defaults live in ~/.coursepath and can be overridden through environment
variables (or a .env file in the working directory):

- COURSEPATH_HOME: data directory
- COURSEPATH_DB: progress database file
- COURSEPATH_CATALOG: catalog YAML file (defaults to the bundled course)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

STORAGE_KEY = "completedChapters"

DEFAULT_HOME_DIR = Path.home() / ".coursepath"
BUNDLED_CATALOG = Path(__file__).parent / "data" / "course.yaml"


def get_home_dir() -> Path:
    """Data directory holding the progress database."""
    value = os.environ.get("COURSEPATH_HOME")
    return Path(value).expanduser() if value else DEFAULT_HOME_DIR


def get_progress_db_path() -> Path:
    """Path of the SQLite file shared by every open view."""
    value = os.environ.get("COURSEPATH_DB")
    if value:
        return Path(value).expanduser()
    return get_home_dir() / "progress.db"


def get_catalog_path() -> Path:
    """Catalog document to load at startup."""
    value = os.environ.get("COURSEPATH_CATALOG")
    return Path(value).expanduser() if value else BUNDLED_CATALOG


def setup_logging(level: Optional[int] = None):
    """Configure root logging for entry points (app, CLI)."""
    if level is None:
        level = logging.DEBUG if os.environ.get("COURSEPATH_DEBUG") else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)

"""
Catalog loader - Build a CourseCatalog from a YAML document.

The catalog is configuration: it is read once at startup, validated with
the Pydantic schemas, and handed to consumers as a read-only object.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from coursepath.config import get_catalog_path
from coursepath.schemas import CatalogDocument

from .catalog import CourseCatalog

logger = logging.getLogger(__name__)


def catalog_from_dict(raw: dict[str, Any]) -> CourseCatalog:
    """
    Build a catalog from already-parsed data.

    Raises:
        pydantic.ValidationError: If the document shape is invalid
        CatalogError: If ids, slugs or sequence numbers collide
    """
    document = CatalogDocument.model_validate(raw)
    return CourseCatalog(document.parts, stats=document.stats, title=document.title)


def load_catalog(path: str | Path) -> CourseCatalog:
    """
    Load a catalog YAML file.

    Args:
        path: Path to the catalog document

    Returns:
        The validated CourseCatalog

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Catalog not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    catalog = catalog_from_dict(raw or {})
    logger.info(f"Loaded catalog from {file_path}: {len(catalog)} chapters")
    return catalog


def load_default_catalog(path: Optional[Path] = None) -> CourseCatalog:
    """Load the configured catalog (COURSEPATH_CATALOG or the bundled course)."""
    return load_catalog(path or get_catalog_path())

"""Release catalog module.

This module handles:
- The ReleaseRecord model
- Finding and adding records by tag
- Loading and saving the catalog document
"""

from release_prepare.catalog.document import (
    CatalogCorruptError,
    CatalogError,
    DuplicateTagError,
    ReleaseCatalog,
    find_invalid_xml_char,
    load_catalog,
    parse_catalog,
    render_catalog,
    save_catalog,
)
from release_prepare.catalog.models import ReleaseRecord

__all__ = [
    "CatalogCorruptError",
    "CatalogError",
    "DuplicateTagError",
    "ReleaseCatalog",
    "ReleaseRecord",
    "find_invalid_xml_char",
    "load_catalog",
    "parse_catalog",
    "render_catalog",
    "save_catalog",
]

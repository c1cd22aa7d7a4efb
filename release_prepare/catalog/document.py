"""Release catalog document.

The catalog is an XML document in the deploy store holding one ``<release>``
element per tag. It is the single source of truth for release metadata: it
is loaded at the start of a run and rewritten as a whole at the end.

Document layout::

    <releases>
      <release>
        <tag>6.4.5</tag>
        <public>0</public>
        ...
        <locales>
          <en><changelog>...</changelog></en>
        </locales>
      </release>
    </releases>
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from copy import deepcopy
from typing import TYPE_CHECKING

from pydantic import ValidationError

from release_prepare.catalog.models import ReleaseRecord
from release_prepare.storage.base import StorageError

if TYPE_CHECKING:
    from release_prepare.storage.base import DeployStore

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "releases"
RELEASE_ELEMENT = "release"
LOCALES_ELEMENT = "locales"
CHANGELOG_ELEMENT = "changelog"

# Scalar fields in document order
TEXT_FIELDS = (
    "tag",
    "version",
    "version_text",
    "minimum_version",
    "type",
    "public",
    "ea",
    "revision",
    "release_date",
    "github_repo",
    "upgrade_md",
    "download_link_install",
    "download_link_update",
    "sha1_install",
    "sha256_install",
    "sha1_update",
    "sha256_update",
    "manual",
)
BOOL_FIELDS = frozenset({"public", "ea", "manual"})
OPTIONAL_FIELDS = frozenset({"version_text", "manual"})

TRUE_VALUES = {"1", "true", "yes"}
FALSE_VALUES = {"", "0", "false", "no"}

# Anything outside the XML 1.0 Char production
INVALID_XML_CHAR = re.compile(
    r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


class CatalogError(Exception):
    """Base error for catalog operations."""

    def __init__(self, message: str, code: str = "catalog_error") -> None:
        super().__init__(message)
        self.code = code


class CatalogCorruptError(CatalogError):
    """Raised when the catalog document is missing or cannot be parsed."""

    def __init__(self, message: str, code: str = "catalog_corrupt") -> None:
        super().__init__(message, code=code)


class DuplicateTagError(CatalogError):
    """Raised when adding a record for a tag that already exists."""

    def __init__(self, tag: str) -> None:
        super().__init__(
            f"Release already exists in catalog: {tag}", code="duplicate_tag"
        )
        self.tag = tag


class ReleaseCatalog:
    """Ordered collection of release records, unique by tag.

    Args:
        records: Initial records in document order.
        root_element: Name of the document element.
        root_attrib: Attributes of the document element.
        extra_elements: Serialized non-release children of the document
            element, written back ahead of the releases.
    """

    def __init__(
        self,
        records: list[ReleaseRecord] | None = None,
        root_element: str = ROOT_ELEMENT,
        root_attrib: dict[str, str] | None = None,
        extra_elements: list[str] | None = None,
    ) -> None:
        self.root_element = root_element
        self.root_attrib = dict(root_attrib or {})
        self.extra_elements = list(extra_elements or [])
        self._records: list[ReleaseRecord] = []
        for record in records or []:
            self._insert(record)

    def __iter__(self) -> Iterator[ReleaseRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def find_by_tag(self, tag: str) -> ReleaseRecord | None:
        """Return the record for ``tag``, or None if absent."""
        for record in self._records:
            if record.tag == tag:
                return record
        return None

    def add_record(self, tag: str) -> ReleaseRecord:
        """Create and append a record with default field values.

        Raises:
            DuplicateTagError: If a record for ``tag`` already exists.
        """
        record = ReleaseRecord(tag=tag, version=tag.removeprefix("v"))
        self._insert(record)
        logger.info("Added release %s to catalog", tag)
        return record

    def _insert(self, record: ReleaseRecord) -> None:
        if self.find_by_tag(record.tag) is not None:
            raise DuplicateTagError(record.tag)
        self._records.append(record)


def find_invalid_xml_char(text: str) -> str | None:
    """Return the first character of ``text`` that XML 1.0 cannot carry."""
    match = INVALID_XML_CHAR.search(text)
    return match.group() if match else None


def _parse_bool(tag: str, name: str, text: str) -> bool:
    value = text.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise CatalogCorruptError(f"Release {tag}: invalid boolean for {name}: {text!r}")


def _parse_locales(element: ET.Element) -> dict[str, str]:
    locales: dict[str, str] = {}
    for locale in element:
        changelog = locale.find(CHANGELOG_ELEMENT)
        text = changelog.text if changelog is not None else locale.text
        locales[locale.tag] = text or ""
    return locales


def _capture_element(element: ET.Element) -> str:
    """Serialize an element we do not interpret, without its layout whitespace.

    Indentation is recreated on render, so whitespace-only tails and the
    whitespace-only text of elements with children are dropped here.
    """
    clone = deepcopy(element)
    clone.tail = None
    for node in clone.iter():
        if len(node) and node.text is not None and not node.text.strip():
            node.text = None
        if node is not clone and node.tail is not None and not node.tail.strip():
            node.tail = None
    return ET.tostring(clone, encoding="unicode")


def _parse_record(element: ET.Element) -> ReleaseRecord:
    tag_element = element.find("tag")
    tag = (tag_element.text or "").strip() if tag_element is not None else ""
    if not tag:
        raise CatalogCorruptError("Release entry without a tag")

    data: dict[str, object] = {}
    extra: list[str] = []
    for child in element:
        text = child.text or ""
        if child.tag == LOCALES_ELEMENT:
            data["locales"] = _parse_locales(child)
        elif child.tag in BOOL_FIELDS:
            data[child.tag] = _parse_bool(tag, child.tag, text)
        elif child.tag in TEXT_FIELDS:
            data[child.tag] = text
        else:
            extra.append(_capture_element(child))
    data["tag"] = tag
    data["extra"] = extra

    try:
        return ReleaseRecord.model_validate(data)
    except ValidationError as e:
        raise CatalogCorruptError(f"Release {tag}: {e}") from e


def parse_catalog(content: bytes | str) -> ReleaseCatalog:
    """Parse a catalog document.

    Args:
        content: XML document.

    Returns:
        ReleaseCatalog with records in document order. Children of the
        document element other than releases are kept verbatim.

    Raises:
        CatalogCorruptError: If the document is not valid XML or holds
            invalid or duplicate records.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise CatalogCorruptError(f"Catalog is not valid XML: {e}") from e

    records: list[ReleaseRecord] = []
    extra_elements: list[str] = []
    for child in root:
        if child.tag == RELEASE_ELEMENT:
            records.append(_parse_record(child))
        else:
            extra_elements.append(_capture_element(child))

    try:
        return ReleaseCatalog(
            records,
            root_element=root.tag,
            root_attrib=dict(root.attrib),
            extra_elements=extra_elements,
        )
    except DuplicateTagError as e:
        raise CatalogCorruptError(f"Catalog lists {e.tag} more than once") from e


def _format_value(name: str, value: object) -> str:
    if name in BOOL_FIELDS:
        return "1" if value else "0"
    return str(value)


def _add_text(parent: ET.Element, name: str, text: str, tag: str) -> ET.Element:
    char = find_invalid_xml_char(text)
    if char is not None:
        raise CatalogError(
            f"Release {tag}: {name} contains {char!r}, which XML cannot carry",
            code="invalid_xml_text",
        )
    element = ET.SubElement(parent, name)
    element.text = text
    return element


def _restore_element(parent: ET.Element, xml: str, owner: str) -> None:
    try:
        parent.append(ET.fromstring(xml))
    except ET.ParseError as e:
        raise CatalogError(
            f"{owner}: cannot restore element {xml[:40]!r}: {e}",
            code="invalid_xml_text",
        ) from e


def _render_record(parent: ET.Element, record: ReleaseRecord) -> None:
    element = ET.SubElement(parent, RELEASE_ELEMENT)
    for name in TEXT_FIELDS:
        value = getattr(record, name)
        if value is None and name in OPTIONAL_FIELDS:
            continue
        _add_text(element, name, _format_value(name, value), record.tag)

    if record.locales:
        locales = ET.SubElement(element, LOCALES_ELEMENT)
        for locale, text in record.locales.items():
            locale_element = ET.SubElement(locales, locale)
            _add_text(locale_element, CHANGELOG_ELEMENT, text, record.tag)

    for xml in record.extra:
        _restore_element(element, xml, f"Release {record.tag}")


def render_catalog(catalog: ReleaseCatalog) -> bytes:
    """Serialize a catalog as a pretty-printed XML document.

    Carriage returns in text are written as ``&#13;`` so that parsers do
    not fold ``\\r\\n`` into ``\\n`` on the next load.

    Raises:
        CatalogError: If a value holds a character XML 1.0 cannot carry.
    """
    root = ET.Element(catalog.root_element, catalog.root_attrib)
    for xml in catalog.extra_elements:
        _restore_element(root, xml, f"<{catalog.root_element}>")
    for record in catalog:
        _render_record(root, record)
    ET.indent(root, space="  ")
    content = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    # Attribute values already carry CR as a character reference
    return content.replace(b"\r", b"&#13;") + b"\n"


def load_catalog(store: DeployStore, path: str) -> ReleaseCatalog:
    """Load the catalog document from the deploy store.

    Raises:
        CatalogCorruptError: If the document is missing, unreadable or invalid.
    """
    try:
        content = store.read(path)
    except StorageError as e:
        code = "catalog_missing" if e.code == "not_found" else "catalog_corrupt"
        raise CatalogCorruptError(
            f"Cannot read catalog {path}: {e}", code=code
        ) from e

    catalog = parse_catalog(content)
    logger.info("Loaded catalog %s (%d releases)", path, len(catalog))
    return catalog


def save_catalog(store: DeployStore, catalog: ReleaseCatalog, path: str) -> None:
    """Rewrite the whole catalog document in the deploy store.

    The document is rendered before anything is written, so a value that
    cannot be serialized leaves the stored document untouched.
    """
    store.write(path, render_catalog(catalog))
    logger.info("Saved catalog %s (%d releases)", path, len(catalog))


__all__ = [
    "CatalogCorruptError",
    "CatalogError",
    "DuplicateTagError",
    "ReleaseCatalog",
    "find_invalid_xml_char",
    "load_catalog",
    "parse_catalog",
    "render_catalog",
    "save_catalog",
]

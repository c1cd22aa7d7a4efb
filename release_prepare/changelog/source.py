"""Changelog sources.

This module handles:
- Fetching per-locale changelog text for a release tag over HTTP
- Rendering changelog entries (markdown with YAML front matter) from a
  release directory
- Wrapping fetches in a ChangelogOutcome so callers can continue without
  changelog content
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import httpx
import yaml

from release_prepare.catalog.document import find_invalid_xml_char
from release_prepare.types import ChangelogOutcome

logger = logging.getLogger(__name__)

# Timeout for changelog requests (seconds)
CHANGELOG_TIMEOUT = 30

FRONT_MATTER_DELIMITER = "---"


class ChangelogFetchError(Exception):
    """Raised when changelog content for a tag cannot be fetched."""

    def __init__(self, message: str, tag: str, code: str = "changelog_error") -> None:
        """Initialize ChangelogFetchError.

        Args:
            message: Error description.
            tag: Release tag the changelog was requested for.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.tag = tag
        self.code = code


class ChangelogSource(Protocol):
    """Source of changelog text keyed by locale."""

    def fetch(self, tag: str) -> dict[str, str]: ...


class HttpChangelogSource:
    """Fetch changelogs from ``GET <base_url>/<tag>``.

    The response must be a JSON object mapping locale codes to text.
    """

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        timeout: float = CHANGELOG_TIMEOUT,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, tag: str) -> dict[str, str]:
        url = f"{self.base_url}/{tag}"
        logger.debug("Fetching changelog from %s", url)

        try:
            response = self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ChangelogFetchError(
                f"HTTP error fetching changelog for {tag}: {e.response.status_code}",
                tag=tag,
                code="http_error",
            ) from e
        except httpx.TimeoutException as e:
            raise ChangelogFetchError(
                f"Timeout fetching changelog from {url}",
                tag=tag,
                code="timeout",
            ) from e
        except httpx.RequestError as e:
            raise ChangelogFetchError(
                f"Network error fetching changelog: {e}",
                tag=tag,
                code="network_error",
            ) from e
        except ValueError as e:
            raise ChangelogFetchError(
                f"Changelog response for {tag} is not JSON",
                tag=tag,
                code="changelog_invalid",
            ) from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise ChangelogFetchError(
                f"Changelog for {tag} must map locales to text",
                tag=tag,
                code="changelog_invalid",
            )
        return data


@dataclass
class ChangelogEntry:
    """A single changelog file."""

    filename: str
    title: str
    issue: str | None = None
    body: str = ""

    def render(self) -> str:
        if self.issue:
            return f"* {self.issue} - {self.title}"
        return f"* {self.title}"


def parse_changelog_entry(filename: str, content: str) -> ChangelogEntry:
    """Parse a markdown changelog entry with YAML front matter.

    Raises:
        ValueError: If the front matter is missing or has no title.
        yaml.YAMLError: If the front matter is not valid YAML.
    """
    lines = content.lstrip().splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        raise ValueError(f"{filename}: missing front matter")

    try:
        end = next(
            i
            for i, line in enumerate(lines[1:], start=1)
            if line.strip() == FRONT_MATTER_DELIMITER
        )
    except StopIteration:
        raise ValueError(f"{filename}: unterminated front matter") from None

    meta: Any = yaml.safe_load("\n".join(lines[1:end])) or {}
    if not isinstance(meta, dict) or not meta.get("title"):
        raise ValueError(f"{filename}: front matter needs a title")

    issue = meta.get("issue")
    return ChangelogEntry(
        filename=filename,
        title=str(meta["title"]).strip(),
        issue=str(issue).strip() if issue else None,
        body="\n".join(lines[end + 1 :]).strip(),
    )


def release_directory_name(tag: str) -> str:
    """Directory holding the entries of a release (``6.4.5`` -> ``release-6-4-5``)."""
    return "release-" + tag.removeprefix("v").replace(".", "-")


class DirectoryChangelogSource:
    """Render changelogs from ``<root>/release-<tag>/*.md`` entries.

    The same rendered text is returned for every configured locale.
    """

    def __init__(self, root: Path, locales: list[str]) -> None:
        self.root = Path(root)
        self.locales = list(locales)

    def fetch(self, tag: str) -> dict[str, str]:
        release_dir = self.root / release_directory_name(tag)
        if not release_dir.is_dir():
            raise ChangelogFetchError(
                f"No changelog directory for {tag}: {release_dir}",
                tag=tag,
                code="changelog_missing",
            )

        entries: list[ChangelogEntry] = []
        for path in sorted(release_dir.glob("*.md")):
            try:
                entries.append(
                    parse_changelog_entry(path.name, path.read_text(encoding="utf-8"))
                )
            except (OSError, ValueError, yaml.YAMLError) as e:
                raise ChangelogFetchError(
                    f"Invalid changelog entry {path.name}: {e}",
                    tag=tag,
                    code="changelog_invalid",
                ) from e

        if not entries:
            raise ChangelogFetchError(
                f"Changelog directory for {tag} has no entries",
                tag=tag,
                code="changelog_empty",
            )

        text = "\n".join(entry.render() for entry in entries)
        logger.debug("Rendered %d changelog entries for %s", len(entries), tag)
        return dict.fromkeys(self.locales, text)


def fetch_changelog(source: ChangelogSource, tag: str) -> ChangelogOutcome:
    """Fetch changelog content, reporting failure as an outcome.

    Any error raised by the source is reported, not raised. Content that
    the catalog document cannot carry is reported as ``changelog_invalid``.

    Args:
        source: Changelog source.
        tag: Release tag.

    Returns:
        ChangelogOutcome with locales on success, error details otherwise.
    """
    try:
        locales = source.fetch(tag)
    except ChangelogFetchError as e:
        return ChangelogOutcome.failed(str(e), code=e.code)
    except Exception as e:
        logger.debug("Changelog source failed for %s", tag, exc_info=True)
        return ChangelogOutcome.failed(
            f"{type(e).__name__}: {e}", code="changelog_error"
        )

    for locale, text in locales.items():
        char = find_invalid_xml_char(text)
        if char is not None:
            return ChangelogOutcome.failed(
                f"Changelog {locale} for {tag} contains unsupported character "
                f"{char!r}",
                code="changelog_invalid",
            )
    return ChangelogOutcome.ok(locales)


__all__ = [
    "CHANGELOG_TIMEOUT",
    "ChangelogEntry",
    "ChangelogFetchError",
    "ChangelogSource",
    "DirectoryChangelogSource",
    "HttpChangelogSource",
    "fetch_changelog",
    "parse_changelog_entry",
    "release_directory_name",
]

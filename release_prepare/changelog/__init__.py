"""Changelog module.

This module provides changelog sources (HTTP and release directories) and
the outcome-returning fetch used by release preparation.
"""

from release_prepare.changelog.source import (
    ChangelogFetchError,
    ChangelogSource,
    DirectoryChangelogSource,
    HttpChangelogSource,
    fetch_changelog,
)

__all__ = [
    "ChangelogFetchError",
    "ChangelogSource",
    "DirectoryChangelogSource",
    "HttpChangelogSource",
    "fetch_changelog",
]

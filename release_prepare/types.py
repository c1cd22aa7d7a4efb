"""Shared type definitions for release_prepare.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from release_prepare.catalog.models import ReleaseRecord


class PreparationStatus(str, Enum):
    """Terminal state of a release preparation run."""

    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class PreparationStep(str, Enum):
    """Steps of a release preparation run, in execution order."""

    LOAD = "load"
    RESOLVE = "resolve"
    GUARD = "guard"
    METADATA = "metadata"
    UPLOAD = "upload"
    CHANGELOG = "changelog"
    SAVE = "save"
    REGISTER = "register"


@dataclass
class ArtifactUpload:
    """Result of hashing and uploading one artifact."""

    url: str
    path: str
    sha1: str
    sha256: str
    size_bytes: int


@dataclass
class ChangelogOutcome:
    """Result of a changelog fetch.

    Exactly one of ``locales`` (on success) or ``error`` is meaningful.
    """

    success: bool
    locales: dict[str, str] = field(default_factory=dict)
    error: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls, locales: dict[str, str]) -> ChangelogOutcome:
        return cls(success=True, locales=dict(locales))

    @classmethod
    def failed(cls, error: str, code: str | None = None) -> ChangelogOutcome:
        return cls(success=False, error=error, code=code)


@dataclass
class PreparationResult:
    """Outcome of ``ReleasePreparer.prepare_release``."""

    tag: str
    status: PreparationStatus
    step: PreparationStep
    message: str
    code: str | None = None
    record: ReleaseRecord | None = None
    catalog_saved: bool = False
    changelog_merged: bool = False
    published: bool = False

    @property
    def success(self) -> bool:
        return self.status == PreparationStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "tag": self.tag,
            "status": self.status.value,
            "step": self.step.value,
            "message": self.message,
            "catalog_saved": self.catalog_saved,
            "changelog_merged": self.changelog_merged,
            "published": self.published,
        }
        if self.code is not None:
            result["code"] = self.code
        if self.record is not None:
            result["record"] = self.record.model_dump(exclude_none=True)
        return result


__all__ = [
    "ArtifactUpload",
    "ChangelogOutcome",
    "PreparationResult",
    "PreparationStatus",
    "PreparationStep",
]

"""Pydantic model for release catalog records.

One ReleaseRecord exists per release tag. Digest and download link fields
are written only from an ArtifactUpload through ``apply_upload``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from release_prepare.types import ArtifactUpload

ArtifactVariant = Literal["install", "update"]


class ReleaseRecord(BaseModel):
    """A release entry of the catalog.

    Attributes:
        tag: Release tag, unique within the catalog.
        version: Display version derived from the tag.
        version_text: Optional free-form version label.
        minimum_version: Oldest version allowed to update to this release.
        type: Release type (Major, Minor, Patch, RC, ...).
        public: Whether the release is published. Public records are frozen.
        ea: Early-access flag.
        manual: When true, changelog content is maintained by hand.
        locales: Changelog text per locale code.
        extra: Serialized catalog elements this model does not interpret,
            written back unchanged on save.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    tag: str = Field(min_length=1)
    version: str = ""
    version_text: str | None = None
    minimum_version: str = ""
    type: str = ""
    public: bool = False
    ea: bool = False
    revision: str = ""
    release_date: str = ""
    github_repo: str = ""
    upgrade_md: str = ""
    download_link_install: str = ""
    download_link_update: str = ""
    sha1_install: str = ""
    sha256_install: str = ""
    sha1_update: str = ""
    sha256_update: str = ""
    manual: bool | None = None
    locales: dict[str, str] = Field(default_factory=dict)
    extra: list[str] = Field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return self.public

    @property
    def is_manual(self) -> bool:
        return self.manual is True

    def apply_upload(self, variant: ArtifactVariant, upload: ArtifactUpload) -> None:
        """Store the download link and digests of an uploaded archive."""
        setattr(self, f"download_link_{variant}", upload.url)
        setattr(self, f"sha1_{variant}", upload.sha1)
        setattr(self, f"sha256_{variant}", upload.sha256)

    def merge_locales(self, locales: dict[str, str]) -> None:
        """Merge changelog text into ``locales`` without dropping other locales."""
        self.locales = {**self.locales, **locales}


__all__ = ["ArtifactVariant", "ReleaseRecord"]

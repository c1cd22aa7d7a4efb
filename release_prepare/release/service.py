"""Release preparation service.

This module provides the high-level release API:
- ReleasePreparer.prepare_release(): main entry point
- Catalog record resolution and the public-release guard
- Archive uploads and changelog merge
- Registration with the update API

A run loads the catalog, resolves the record for the tag, rejects public
records, resets derived metadata, uploads archives, merges the changelog when
permitted, saves the catalog and finally registers the release. Failures
before the save leave the catalog document untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx

from release_prepare.artifacts.upload import (
    UploadError,
    hash_and_upload,
    next_alias_path,
)
from release_prepare.catalog.document import (
    CatalogError,
    ReleaseCatalog,
    load_catalog,
    save_catalog,
)
from release_prepare.changelog.source import (
    ChangelogSource,
    DirectoryChangelogSource,
    HttpChangelogSource,
    fetch_changelog,
)
from release_prepare.storage.base import StorageError
from release_prepare.storage.local import LocalStore
from release_prepare.types import (
    ArtifactUpload,
    PreparationResult,
    PreparationStatus,
    PreparationStep,
)
from release_prepare.updateapi.client import RegistrationError, UpdateApiClient
from release_prepare.versioning import (
    InvalidTagError,
    get_display_version,
    get_major_branch,
    get_release_type,
    get_update_channel,
    parse_tag,
)

if TYPE_CHECKING:
    from release_prepare.catalog.models import ArtifactVariant, ReleaseRecord
    from release_prepare.config import Settings
    from release_prepare.storage.base import ArtifactStore, DeployStore

logger = logging.getLogger(__name__)

INSTALL_ZIP = "install.zip"
UPDATE_ZIP = "update.zip"
INSTALL_TAR = "install.tar.xz"


class AlreadyPublicError(Exception):
    """Raised when preparing a release whose record is already public."""

    def __init__(self, tag: str, code: str = "already_public") -> None:
        super().__init__(f"Release {tag} is already public")
        self.tag = tag
        self.code = code


class ReleaseServiceError(Exception):
    """Base error for release service setup."""

    def __init__(self, message: str, code: str = "release_service_error") -> None:
        super().__init__(message)
        self.code = code


class UpdateApi(Protocol):
    """Update API operations used for registration."""

    def insert_release_data(self, params: dict[str, str]) -> None: ...

    def update_release_notes(self, params: dict[str, str]) -> None: ...

    def publish_release(self, params: dict[str, str]) -> None: ...


FATAL_ERRORS = (
    InvalidTagError,
    CatalogError,
    UploadError,
    StorageError,
    RegistrationError,
)


class ReleasePreparer:
    """Prepare and register a release.

    Args:
        settings: Application settings (public domain, minimum version, ...).
        deploy: Store receiving artifacts and holding the catalog document.
        artifacts: Store the archives are read from.
        update_api: Update API client.
        changelog: Optional changelog source. Without one, no changelog
            content is merged.
    """

    def __init__(
        self,
        settings: Settings,
        deploy: DeployStore,
        artifacts: ArtifactStore,
        update_api: UpdateApi,
        changelog: ChangelogSource | None = None,
    ) -> None:
        self.settings = settings
        self.deploy = deploy
        self.artifacts = artifacts
        self.update_api = update_api
        self.changelog = changelog

    def prepare_release(self, tag: str) -> PreparationResult:
        """Run release preparation for ``tag``.

        Returns:
            PreparationResult. ``completed`` when registration succeeded,
            ``rejected`` when the release is already public, ``failed`` with
            the failing step and error code otherwise.
        """
        step = PreparationStep.LOAD
        record: ReleaseRecord | None = None
        catalog_saved = False
        changelog_merged = False
        published = False

        try:
            catalog = self.load_catalog()

            step = PreparationStep.RESOLVE
            record = self.resolve_record(catalog, tag)

            step = PreparationStep.GUARD
            if record.is_public:
                raise AlreadyPublicError(tag)

            step = PreparationStep.METADATA
            self.set_release_properties(tag, record)

            step = PreparationStep.UPLOAD
            self.upload_archives(record)

            step = PreparationStep.CHANGELOG
            changelog_merged = self.merge_changelog(record)

            step = PreparationStep.SAVE
            self.store_catalog(catalog)
            catalog_saved = True

            step = PreparationStep.REGISTER
            published = self.register_update(tag, record)

        except AlreadyPublicError as e:
            logger.warning("Rejected release preparation: %s", e)
            return PreparationResult(
                tag=tag,
                status=PreparationStatus.REJECTED,
                step=step,
                message=str(e),
                code=e.code,
                record=record,
            )
        except FATAL_ERRORS as e:
            message = f"{step.value} step failed: {e}"
            if catalog_saved:
                message += (
                    "; the catalog was saved but the update API was not fully "
                    "informed, re-run preparation to retry registration"
                )
            logger.error("Release preparation for %s failed: %s", tag, message)
            return PreparationResult(
                tag=tag,
                status=PreparationStatus.FAILED,
                step=step,
                message=message,
                code=getattr(e, "code", None),
                record=record if catalog_saved else None,
                catalog_saved=catalog_saved,
                changelog_merged=changelog_merged,
            )

        logger.info("Release %s prepared", tag)
        return PreparationResult(
            tag=tag,
            status=PreparationStatus.COMPLETED,
            step=step,
            message=f"Release {tag} prepared and registered",
            record=record,
            catalog_saved=catalog_saved,
            changelog_merged=changelog_merged,
            published=published,
        )

    def load_catalog(self) -> ReleaseCatalog:
        return load_catalog(self.deploy, self.settings.catalog_path)

    def store_catalog(self, catalog: ReleaseCatalog) -> None:
        save_catalog(self.deploy, catalog, self.settings.catalog_path)

    def resolve_record(self, catalog: ReleaseCatalog, tag: str) -> ReleaseRecord:
        """Find the record for ``tag``, creating it on first preparation.

        Raises:
            InvalidTagError: If the tag is malformed.
        """
        parse_tag(tag)
        record = catalog.find_by_tag(tag)
        if record is None:
            record = catalog.add_record(tag)
        return record

    def set_release_properties(self, tag: str, record: ReleaseRecord) -> None:
        """Reset derived and operator-controlled fields of a record."""
        repo_url = self.settings.github_repo_url.rstrip("/")

        record.minimum_version = self.settings.minimum_version
        record.public = False
        record.ea = False
        record.revision = ""
        record.type = get_release_type(tag)
        record.release_date = ""
        record.tag = tag
        record.github_repo = f"{repo_url}/tree/{tag}"
        record.upgrade_md = (
            f"{repo_url}/blob/{tag}/UPGRADE-{get_major_branch(tag)}.md"
        )
        if not record.version:
            record.version = get_display_version(tag)

    def _upload(
        self, tag: str, source: str, target_path: str | None = None
    ) -> ArtifactUpload:
        return hash_and_upload(
            self.artifacts,
            self.deploy,
            tag,
            source,
            public_domain=self.settings.public_domain,
            namespace=self.settings.artifact_namespace,
            target_path=target_path,
        )

    def upload_archives(self, record: ReleaseRecord) -> None:
        """Upload the release archives and record their links and digests.

        Raises:
            UploadError: If any upload fails.
        """
        variants: list[tuple[ArtifactVariant, str]] = [
            ("install", INSTALL_ZIP),
            ("update", UPDATE_ZIP),
        ]
        for variant, source in variants:
            record.apply_upload(variant, self._upload(record.tag, source))

        self._upload(record.tag, INSTALL_TAR)
        self._upload(
            record.tag,
            INSTALL_TAR,
            next_alias_path(self.settings.artifact_namespace, record.tag, INSTALL_TAR),
        )

    def may_alter_changelog(self, record: ReleaseRecord) -> bool:
        return not record.is_public and not record.is_manual

    def merge_changelog(self, record: ReleaseRecord) -> bool:
        """Merge changelog content into the record when permitted.

        Returns:
            True if changelog content was merged.
        """
        if not self.may_alter_changelog(record):
            logger.info("May not alter changelog of %s", record.tag)
            return False
        if self.changelog is None:
            logger.info("No changelog source configured, skipping %s", record.tag)
            return False

        outcome = fetch_changelog(self.changelog, record.tag)
        if not outcome.success:
            logger.warning(
                "Continuing without changelog for %s: %s", record.tag, outcome.error
            )
            return False

        record.merge_locales(outcome.locales)
        logger.info(
            "Merged changelog for %s (%s)",
            record.tag,
            ", ".join(sorted(outcome.locales)),
        )
        return True

    def build_release_parameters(
        self, tag: str, record: ReleaseRecord
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Project a record into update API parameters.

        Returns:
            Tuple of (base parameters, insert-release-data parameters).
        """
        base = {
            "tag": tag,
            "release-version": record.version,
            "channel": get_update_channel(tag),
        }
        if record.version_text:
            base["version-text"] = record.version_text

        insert = {
            **base,
            "min-version": record.minimum_version,
            "install-uri": record.download_link_install,
            "install-size": str(self.artifacts.size(INSTALL_ZIP)),
            "install-sha1": record.sha1_install,
            "install-sha256": record.sha256_install,
            "update-uri": record.download_link_update,
            "update-size": str(self.artifacts.size(UPDATE_ZIP)),
            "update-sha1": record.sha1_update,
            "update-sha256": record.sha256_update,
        }
        return base, insert

    def register_update(self, tag: str, record: ReleaseRecord) -> bool:
        """Register the release with the update API.

        ``publish-release`` is only called for public records. Within a
        single run the metadata step has reset ``public``, so this only
        happens when the record was made public by someone else meanwhile.

        Returns:
            True if the release was published.

        Raises:
            RegistrationError: If an update API call fails.
        """
        base, insert = self.build_release_parameters(tag, record)

        self.update_api.insert_release_data(insert)
        self.update_api.update_release_notes(base)

        if record.is_public:
            self.update_api.publish_release(base)
            return True
        return False


def build_changelog_source(
    settings: Settings,
    client: httpx.Client,
) -> ChangelogSource | None:
    """Create the changelog source configured in settings, if any."""
    if settings.changelog_url:
        return HttpChangelogSource(
            client, settings.changelog_url, timeout=settings.http_timeout
        )
    if settings.changelog_dir is not None:
        return DirectoryChangelogSource(
            settings.changelog_dir, settings.changelog_locales
        )
    return None


def build_preparer(settings: Settings, client: httpx.Client) -> ReleasePreparer:
    """Create a ReleasePreparer backed by local stores and HTTP services.

    Raises:
        ReleaseServiceError: If the update API URL is not configured.
    """
    if not settings.update_api_url:
        raise ReleaseServiceError(
            "Update API URL is not configured (RELEASE_PREP_UPDATE_API_URL)",
            code="missing_update_api",
        )

    return ReleasePreparer(
        settings=settings,
        deploy=LocalStore(settings.deploy_dir),
        artifacts=LocalStore(settings.artifacts_dir),
        update_api=UpdateApiClient(
            client, settings.update_api_url, timeout=settings.http_timeout
        ),
        changelog=build_changelog_source(settings, client),
    )


__all__ = [
    "AlreadyPublicError",
    "INSTALL_TAR",
    "INSTALL_ZIP",
    "ReleasePreparer",
    "ReleaseServiceError",
    "UPDATE_ZIP",
    "UpdateApi",
    "build_changelog_source",
    "build_preparer",
]

"""Configuration settings for release_prepare.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MINIMUM_VERSION = "6.2.0"
DEFAULT_CATALOG_PATH = "_meta/shopware6.xml"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the RELEASE_PREP_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_PREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Stores
    deploy_dir: Path = Field(
        default=Path("deploy"),
        description="Root directory of the deploy store",
    )
    artifacts_dir: Path = Field(
        default=Path("artifacts"),
        description="Root directory holding the artifacts to publish",
    )
    public_domain: str = Field(
        default="https://releases.example.com",
        description="Public URL root of the deploy store",
    )
    catalog_path: str = Field(
        default=DEFAULT_CATALOG_PATH,
        description="Path of the release catalog document in the deploy store",
    )
    artifact_namespace: str = Field(
        default="sw6",
        description="Path prefix for uploaded artifacts",
    )

    # Release metadata
    minimum_version: str = Field(
        default=DEFAULT_MINIMUM_VERSION,
        description="Minimum version allowed to update to a new release",
    )
    github_repo_url: str = Field(
        default="https://github.com/shopware/platform",
        description="Repository URL used for source and upgrade notes links",
    )

    # Changelog
    changelog_url: str | None = Field(
        default=None,
        description="Base URL of the changelog service (GET <url>/<tag>)",
    )
    changelog_dir: Path | None = Field(
        default=None,
        description="Directory with per-release changelog entries",
    )
    changelog_locales: list[str] = Field(
        default_factory=lambda: ["de", "en"],
        description="Locales rendered from directory changelog entries",
    )

    # Update API
    update_api_url: str | None = Field(
        default=None,
        description="Base URL of the update API",
    )

    http_timeout: int = Field(
        default=60,
        ge=1,
        description="Timeout in seconds for changelog and update API calls",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_MINIMUM_VERSION",
    "Settings",
    "get_settings",
    "print_settings_json",
]

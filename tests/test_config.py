"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from release_prepare.config import Settings, get_settings, print_settings_json


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert settings.deploy_dir == Path("deploy")
        assert settings.artifacts_dir == Path("artifacts")
        assert settings.minimum_version == "6.2.0"
        assert settings.catalog_path == "_meta/shopware6.xml"
        assert settings.artifact_namespace == "sw6"
        assert settings.changelog_url is None
        assert settings.changelog_locales == ["de", "en"]
        assert settings.update_api_url is None
        assert settings.log_level == "INFO"
        assert settings.http_timeout >= 1

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "RELEASE_PREP_MINIMUM_VERSION": "6.3.0",
                "RELEASE_PREP_PUBLIC_DOMAIN": "https://cdn.example.org",
                "RELEASE_PREP_LOG_LEVEL": "DEBUG",
                "RELEASE_PREP_HTTP_TIMEOUT": "15",
            },
        ):
            settings = Settings()
            assert settings.minimum_version == "6.3.0"
            assert settings.public_domain == "https://cdn.example.org"
            assert settings.log_level == "DEBUG"
            assert settings.http_timeout == 15

    def test_settings_paths_from_env(self) -> None:
        """Store directories should be configurable via env."""
        with patch.dict(
            os.environ,
            {
                "RELEASE_PREP_DEPLOY_DIR": "/tmp/test-deploy",
                "RELEASE_PREP_CHANGELOG_DIR": "/tmp/changelog",
            },
        ):
            settings = Settings()
            assert settings.deploy_dir == Path("/tmp/test-deploy")
            assert settings.changelog_dir == Path("/tmp/changelog")

    def test_changelog_locales_from_env(self) -> None:
        """List settings are read as JSON."""
        with patch.dict(os.environ, {"RELEASE_PREP_CHANGELOG_LOCALES": '["en"]'}):
            assert Settings().changelog_locales == ["en"]

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValidationError):
            Settings(http_timeout=0)


class TestGetSettings:
    """Test get_settings function."""

    def test_get_settings_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_print_settings_json(self) -> None:
        """print_settings_json should return valid JSON."""
        settings = Settings()
        parsed = json.loads(print_settings_json(settings))

        assert "deploy_dir" in parsed
        assert "public_domain" in parsed
        assert parsed["minimum_version"] == "6.2.0"
        assert parsed["update_api_url"] is None

    def test_print_settings_json_default(self) -> None:
        """print_settings_json without args should use default settings."""
        parsed = json.loads(print_settings_json())
        assert "catalog_path" in parsed

"""Tests for versioning module."""

import pytest

from release_prepare.versioning import (
    InvalidTagError,
    get_display_version,
    get_major_branch,
    get_minor_branch,
    get_release_type,
    get_update_channel,
    parse_tag,
)


class TestParseTag:
    """Tests for parse_tag function."""

    def test_three_part_tag(self):
        """Should parse MAJOR.MINOR.PATCH tags."""
        parsed = parse_tag("6.4.5")
        assert parsed.numbers == (6, 4, 5)
        assert parsed.suffix is None
        assert parsed.channel == "stable"

    def test_four_part_tag_with_prefix(self):
        """Should accept a leading v and four components."""
        parsed = parse_tag("v6.4.5.0")
        assert parsed.numbers == (6, 4, 5, 0)
        assert parsed.version == "6.4.5.0"

    def test_suffix(self):
        """Should keep the pre-release suffix."""
        parsed = parse_tag("6.5.0-rc1")
        assert parsed.suffix == "rc1"
        assert parsed.channel == "rc"

    @pytest.mark.parametrize(
        "tag", ["", "6.4", "latest", "6.4.5.0.1", "6.4.x", "6.4.5-preview"]
    )
    def test_invalid_tags(self, tag):
        """Should raise InvalidTagError for malformed tags."""
        with pytest.raises(InvalidTagError) as exc_info:
            parse_tag(tag)
        assert exc_info.value.code == "invalid_tag"


class TestBranches:
    """Tests for branch derivation."""

    def test_minor_branch_three_parts(self):
        assert get_minor_branch("6.4.5") == "6.4"

    def test_minor_branch_four_parts(self):
        """Four-part tags keep the first three components."""
        assert get_minor_branch("6.3.1.0") == "6.3.1"
        assert get_minor_branch("v6.3.0.2") == "6.3.0"

    def test_major_branch(self):
        assert get_major_branch("6.4.5") == "6.4"
        assert get_major_branch("v6.3.1.0") == "6.3"

    def test_minor_branch_ignores_suffix(self):
        assert get_minor_branch("6.5.0-rc1") == "6.5"


class TestUpdateChannel:
    """Tests for get_update_channel function."""

    def test_stable(self):
        assert get_update_channel("6.4.5") == "stable"

    @pytest.mark.parametrize(
        ("tag", "channel"),
        [
            ("6.5.0-rc1", "rc"),
            ("6.5.0-RC2", "rc"),
            ("6.5.0-beta", "beta"),
            ("6.5.0-alpha.3", "alpha"),
            ("6.5.0-dev", "dev"),
        ],
    )
    def test_pre_release(self, tag, channel):
        assert get_update_channel(tag) == channel


class TestReleaseType:
    """Tests for get_release_type function."""

    @pytest.mark.parametrize(
        ("tag", "release_type"),
        [
            ("7.0.0", "Major"),
            ("6.5.0", "Minor"),
            ("6.4.5", "Patch"),
            ("v6.4.0.0", "Major"),
            ("v6.4.5.0", "Minor"),
            ("v6.4.5.1", "Patch"),
            ("6.5.0-rc1", "RC"),
            ("6.5.0-beta2", "Beta"),
        ],
    )
    def test_release_types(self, tag, release_type):
        assert get_release_type(tag) == release_type

    def test_invalid_tag(self):
        with pytest.raises(InvalidTagError):
            get_release_type("not-a-tag")


class TestDisplayVersion:
    """Tests for get_display_version function."""

    def test_strips_prefix(self):
        assert get_display_version("v6.4.5.0") == "6.4.5.0"

    def test_plain_tag(self):
        assert get_display_version("6.4.5") == "6.4.5"

"""Version tag classification.

Pure functions deriving branches, update channel and release type from a
release tag such as ``6.4.5``, ``v6.4.5.0`` or ``6.5.0-rc1``. The values are
written into catalog records and update API calls, so they must be stable
for a given tag.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

TAG_PATTERN = re.compile(
    r"^v?(?P<numbers>\d+(?:\.\d+){2,3})(?:-(?P<suffix>[0-9A-Za-z.]+))?$"
)

STABLE_CHANNEL = "stable"

# Suffix prefix -> (update channel, release type)
PRE_RELEASE_STABILITIES: dict[str, tuple[str, str]] = {
    "rc": ("rc", "RC"),
    "beta": ("beta", "Beta"),
    "alpha": ("alpha", "Alpha"),
    "dev": ("dev", "Dev"),
}


class InvalidTagError(ValueError):
    """Raised when a tag does not look like a release version."""

    def __init__(self, tag: str, reason: str | None = None) -> None:
        message = f"Invalid release tag: {tag!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.tag = tag
        self.code = "invalid_tag"


@dataclass(frozen=True)
class ParsedTag:
    """Components of a release tag."""

    tag: str
    numbers: tuple[int, ...]
    suffix: str | None
    channel: str
    pre_release_type: str | None

    @property
    def version(self) -> str:
        """Display version: the tag without a leading ``v``."""
        return self.tag[1:] if self.tag.startswith("v") else self.tag


def _classify_suffix(tag: str, suffix: str) -> tuple[str, str]:
    lowered = suffix.lower()
    for prefix, classification in PRE_RELEASE_STABILITIES.items():
        if lowered.startswith(prefix):
            return classification
    raise InvalidTagError(tag, f"unknown pre-release suffix {suffix!r}")


def parse_tag(tag: str) -> ParsedTag:
    """Parse a release tag.

    Args:
        tag: Tag in ``[v]MAJOR.MINOR.PATCH[.BUILD][-suffix]`` form.

    Returns:
        ParsedTag with numeric components and stability.

    Raises:
        InvalidTagError: If the tag is malformed.
    """
    match = TAG_PATTERN.match(tag.strip()) if tag else None
    if match is None:
        raise InvalidTagError(tag)

    numbers = tuple(int(part) for part in match.group("numbers").split("."))
    suffix = match.group("suffix")

    channel = STABLE_CHANNEL
    pre_release_type = None
    if suffix:
        channel, pre_release_type = _classify_suffix(tag, suffix)

    return ParsedTag(
        tag=tag.strip(),
        numbers=numbers,
        suffix=suffix,
        channel=channel,
        pre_release_type=pre_release_type,
    )


def get_minor_branch(tag: str) -> str:
    """Return the branch a tag is released from.

    ``6.4.5`` -> ``6.4`` and ``6.3.1.0`` -> ``6.3.1``.
    """
    numbers = parse_tag(tag).numbers
    return ".".join(str(n) for n in numbers[:-1])


def get_major_branch(tag: str) -> str:
    """Return the major branch used for upgrade notes (``6.4.5`` -> ``6.4``)."""
    numbers = parse_tag(tag).numbers
    return ".".join(str(n) for n in numbers[:2])


def get_update_channel(tag: str) -> str:
    """Return the update channel for a tag (``stable``, ``rc``, ...)."""
    return parse_tag(tag).channel


def get_release_type(tag: str) -> str:
    """Classify a tag as ``Major``, ``Minor``, ``Patch`` or a pre-release type."""
    parsed = parse_tag(tag)
    if parsed.pre_release_type:
        return parsed.pre_release_type

    _, minor, patch = parsed.numbers[-3:]
    if minor == 0 and patch == 0:
        return "Major"
    if patch == 0:
        return "Minor"
    return "Patch"


def get_display_version(tag: str) -> str:
    """Return the version shown for a tag (leading ``v`` removed)."""
    return parse_tag(tag).version


__all__ = [
    "InvalidTagError",
    "ParsedTag",
    "STABLE_CHANNEL",
    "TAG_PATTERN",
    "get_display_version",
    "get_major_branch",
    "get_minor_branch",
    "get_release_type",
    "get_update_channel",
    "parse_tag",
]

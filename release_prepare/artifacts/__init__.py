"""Artifact module.

This module handles hashing release archives and uploading them to the
deploy store under content-addressed or alias paths.
"""

from release_prepare.artifacts.upload import (
    UploadError,
    content_addressed_path,
    hash_and_upload,
    next_alias_path,
)

__all__ = [
    "UploadError",
    "content_addressed_path",
    "hash_and_upload",
    "next_alias_path",
]

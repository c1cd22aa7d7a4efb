"""Artifact hashing and upload.

This module handles:
- Computing SHA-1 and SHA-256 digests of an artifact in a single pass
- Content-addressed destination paths (``<ns>/<stem>_<tag>_<sha1>.<ext>``)
- The per-branch "next" alias path that is overwritten on every run
- Streaming artifacts from the artifact store into the deploy store
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
from typing import TYPE_CHECKING, BinaryIO

from release_prepare.storage.base import StorageError
from release_prepare.types import ArtifactUpload
from release_prepare.versioning import get_minor_branch

if TYPE_CHECKING:
    from release_prepare.storage.base import ArtifactStore, DeployStore

logger = logging.getLogger(__name__)

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB

# Artifacts larger than this are spooled to disk before the upload
SPOOL_MAX_SIZE = 8 * 1024 * 1024  # 8MB


class UploadError(Exception):
    """Raised when reading or uploading an artifact fails."""

    def __init__(self, message: str, source: str, code: str = "upload_failed") -> None:
        """Initialize UploadError.

        Args:
            message: Error description.
            source: Artifact name being uploaded.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.source = source
        self.code = code


class HashingReader:
    """Stream wrapper that digests every byte read through it."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._sha1 = hashlib.sha1()
        self._sha256 = hashlib.sha256()
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self._sha1.update(chunk)
            self._sha256.update(chunk)
            self.bytes_read += len(chunk)
        return chunk

    def drain(self, chunk_size: int = HASH_CHUNK_SIZE) -> None:
        """Read the rest of the stream so the digests cover all of it."""
        while self.read(chunk_size):
            pass

    @property
    def sha1(self) -> str:
        return self._sha1.hexdigest()

    @property
    def sha256(self) -> str:
        return self._sha256.hexdigest()


def split_artifact_name(source: str) -> tuple[str, str]:
    """Split an artifact name into stem and full extension.

    ``dist/install.tar.xz`` -> ``("install", "tar.xz")``.
    """
    basename = source.rsplit("/", 1)[-1]
    stem, _, extension = basename.partition(".")
    return stem, extension


def _join_extension(name: str, extension: str) -> str:
    return f"{name}.{extension}" if extension else name


def content_addressed_path(namespace: str, tag: str, source: str, sha1: str) -> str:
    """Build the immutable destination path of an artifact.

    Args:
        namespace: Destination path prefix (e.g. ``sw6``).
        tag: Release tag.
        source: Artifact name in the artifact store.
        sha1: SHA-1 hex digest of the artifact.

    Returns:
        Path such as ``sw6/install_6.4.5_<sha1>.zip``.
    """
    stem, extension = split_artifact_name(source)
    return f"{namespace}/" + _join_extension(f"{stem}_{tag}_{sha1}", extension)


def next_alias_path(namespace: str, tag: str, source: str) -> str:
    """Build the mutable "latest build of this branch" path.

    Depends only on the minor branch of ``tag``, e.g.
    ``sw6/install_6.4_next.tar.xz`` for any ``6.4.x`` tag.
    """
    stem, extension = split_artifact_name(source)
    branch = get_minor_branch(tag)
    return f"{namespace}/" + _join_extension(f"{stem}_{branch}_next", extension)


def public_url(public_domain: str, path: str) -> str:
    """Return the public URL of a deploy store path."""
    return f"{public_domain.rstrip('/')}/{path.lstrip('/')}"


def hash_and_upload(
    artifacts: ArtifactStore,
    deploy: DeployStore,
    tag: str,
    source: str,
    *,
    public_domain: str,
    namespace: str,
    target_path: str | None = None,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> ArtifactUpload:
    """Hash an artifact and upload it to the deploy store.

    The artifact is read exactly once, so the digests always describe the
    uploaded bytes. Without ``target_path`` the artifact is stored under its
    content-addressed path, which needs the SHA-1 before the upload starts:
    it is hashed into a spool (memory, then disk past ``SPOOL_MAX_SIZE``) and
    uploaded from there. With ``target_path`` the digests are computed while
    the upload streams.

    Args:
        artifacts: Store the artifact is read from.
        deploy: Store the artifact is uploaded to.
        tag: Release tag.
        source: Artifact name in the artifact store.
        public_domain: Public URL root of the deploy store.
        namespace: Prefix for content-addressed paths.
        target_path: Optional explicit destination path (overwritten).
        chunk_size: Size of chunks for hashing.

    Returns:
        ArtifactUpload with URL, path, digests and size.

    Raises:
        UploadError: If reading or writing fails.
    """
    try:
        if target_path is None:
            with (
                artifacts.read_stream(source) as stream,
                tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE) as spool,
            ):
                reader = HashingReader(stream)
                while chunk := reader.read(chunk_size):
                    spool.write(chunk)
                sha1, sha256, size = reader.sha1, reader.sha256, reader.bytes_read
                target_path = content_addressed_path(namespace, tag, source, sha1)
                spool.seek(0)
                deploy.write_stream(target_path, spool)  # type: ignore[arg-type]
        else:
            with artifacts.read_stream(source) as stream:
                reader = HashingReader(stream)
                deploy.write_stream(target_path, reader)  # type: ignore[arg-type]
                reader.drain(chunk_size)
            sha1, sha256, size = reader.sha1, reader.sha256, reader.bytes_read
    except StorageError as e:
        raise UploadError(
            f"Failed to upload {source} to {target_path or namespace}: {e}",
            source=source,
        ) from e
    except OSError as e:
        raise UploadError(
            f"I/O error uploading {source}: {e}",
            source=source,
        ) from e

    url = public_url(public_domain, target_path)
    logger.info(
        "Uploaded %s to %s (%d bytes, sha1=%s)",
        source,
        target_path,
        size,
        sha1[:16] + "...",
    )

    return ArtifactUpload(
        url=url,
        path=target_path,
        sha1=sha1,
        sha256=sha256,
        size_bytes=size,
    )


__all__ = [
    "HASH_CHUNK_SIZE",
    "HashingReader",
    "SPOOL_MAX_SIZE",
    "UploadError",
    "content_addressed_path",
    "hash_and_upload",
    "next_alias_path",
    "public_url",
    "split_artifact_name",
]

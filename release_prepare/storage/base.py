"""Store interfaces used by the release pipeline.

The deploy store receives uploaded artifacts and holds the release catalog
document. The artifact store is the source of the archives being published.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol


class StorageError(Exception):
    """Raised when a store read or write fails."""

    def __init__(self, message: str, path: str, code: str = "os_error") -> None:
        """Initialize StorageError.

        Args:
            message: Error description.
            path: Store path the operation targeted.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.path = path
        self.code = code


class DeployStore(Protocol):
    """Destination store for artifacts and the release catalog."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes) -> None: ...

    def write_stream(self, path: str, stream: BinaryIO) -> int: ...


class ArtifactStore(Protocol):
    """Source store for release artifacts."""

    def read_stream(self, name: str) -> BinaryIO: ...

    def size(self, name: str) -> int: ...


__all__ = ["ArtifactStore", "DeployStore", "StorageError"]

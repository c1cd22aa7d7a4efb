"""Local directory store.

Implements both store interfaces on top of a directory. Writes go to a
temporary file in the target directory and are moved into place with
``os.replace`` so readers never observe a partially written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from release_prepare.storage.base import StorageError

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024  # 64 KB


class LocalStore:
    """Store rooted at a local directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LocalStore({str(self.root)!r})"

    def resolve(self, path: str) -> Path:
        """Map a store path to a filesystem path below the root.

        Raises:
            StorageError: If the path is absolute or escapes the root.
        """
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise StorageError(
                f"Refusing store path outside of {self.root}: {path!r}",
                path=path,
                code="invalid_path",
            )
        return self.root.joinpath(*relative.parts)

    def read(self, path: str) -> bytes:
        target = self.resolve(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as e:
            raise StorageError(
                f"File not found in store: {path}", path=path, code="not_found"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}", path=path) from e

    def read_stream(self, name: str) -> BinaryIO:
        target = self.resolve(name)
        try:
            return target.open("rb")
        except FileNotFoundError as e:
            raise StorageError(
                f"File not found in store: {name}", path=name, code="not_found"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to open {name}: {e}", path=name) from e

    def size(self, name: str) -> int:
        target = self.resolve(name)
        try:
            return target.stat().st_size
        except FileNotFoundError as e:
            raise StorageError(
                f"File not found in store: {name}", path=name, code="not_found"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to stat {name}: {e}", path=name) from e

    def write(self, path: str, data: bytes) -> None:
        self._atomic_write(path, lambda f: f.write(data))

    def write_stream(self, path: str, stream: BinaryIO) -> int:
        """Copy a stream into the store.

        Returns:
            Number of bytes written.
        """
        return self._atomic_write(
            path, lambda f: _copy_stream(stream, f, COPY_CHUNK_SIZE)
        )

    def _atomic_write(self, path: str, writer: Callable[[BinaryIO], int]) -> int:
        target = self.resolve(path)
        tmp_path: Path | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                written = writer(tmp_file)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}", path=path) from e
        except Exception:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise

        logger.debug("Wrote %s (%d bytes)", target, written)
        return written


def _copy_stream(source: BinaryIO, dest: BinaryIO, chunk_size: int) -> int:
    total = 0
    while chunk := source.read(chunk_size):
        dest.write(chunk)
        total += len(chunk)
    return total


__all__ = ["COPY_CHUNK_SIZE", "LocalStore"]

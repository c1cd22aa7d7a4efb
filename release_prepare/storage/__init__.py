"""Storage module.

This module provides the deploy and artifact store interfaces and the
local directory backend.
"""

from release_prepare.storage.base import ArtifactStore, DeployStore, StorageError
from release_prepare.storage.local import LocalStore

__all__ = ["ArtifactStore", "DeployStore", "LocalStore", "StorageError"]

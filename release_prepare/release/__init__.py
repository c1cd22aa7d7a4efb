"""Release preparation module.

This module drives release preparation end to end: catalog record
resolution, metadata, archive uploads, changelog merge, catalog save and
update API registration.
"""

from release_prepare.release.service import (
    AlreadyPublicError,
    ReleasePreparer,
    build_preparer,
)

__all__ = ["AlreadyPublicError", "ReleasePreparer", "build_preparer"]

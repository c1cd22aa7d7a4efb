"""Update API module.

This module provides the client used to register releases with the
update distribution API.
"""

from release_prepare.updateapi.client import RegistrationError, UpdateApiClient

__all__ = ["RegistrationError", "UpdateApiClient"]

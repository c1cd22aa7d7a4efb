"""Update API client.

Registers releases with the update distribution API. Each call posts the
release parameters as JSON with a bounded timeout and no retry.
"""

from __future__ import annotations

import logging
import httpx

logger = logging.getLogger(__name__)

# Timeout for update API requests (seconds)
UPDATE_API_TIMEOUT = 60

INSERT_RELEASE_DATA = "insert-release-data"
UPDATE_RELEASE_NOTES = "update-release-notes"
PUBLISH_RELEASE = "publish-release"


class RegistrationError(Exception):
    """Raised when an update API call fails."""

    def __init__(
        self,
        message: str,
        action: str,
        code: str = "registration_failed",
    ) -> None:
        """Initialize RegistrationError.

        Args:
            message: Error description.
            action: Update API action that failed.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.action = action
        self.code = code


class UpdateApiClient:
    """Client for the update API."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        timeout: float = UPDATE_API_TIMEOUT,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def insert_release_data(self, params: dict[str, str]) -> None:
        self._post(INSERT_RELEASE_DATA, params)

    def update_release_notes(self, params: dict[str, str]) -> None:
        self._post(UPDATE_RELEASE_NOTES, params)

    def publish_release(self, params: dict[str, str]) -> None:
        self._post(PUBLISH_RELEASE, params)

    def _post(self, action: str, params: dict[str, str]) -> httpx.Response:
        url = f"{self.base_url}/{action}"
        logger.info("Calling update API %s for %s", action, params.get("tag"))

        try:
            response = self.client.post(url, json=params, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RegistrationError(
                f"Update API {action} failed: "
                f"{e.response.status_code} {e.response.reason_phrase}",
                action=action,
                code="http_error",
            ) from e
        except httpx.TimeoutException as e:
            raise RegistrationError(
                f"Timeout calling update API {action}",
                action=action,
                code="timeout",
            ) from e
        except httpx.RequestError as e:
            raise RegistrationError(
                f"Network error calling update API {action}: {e}",
                action=action,
                code="network_error",
            ) from e

        return response


__all__ = [
    "INSERT_RELEASE_DATA",
    "PUBLISH_RELEASE",
    "RegistrationError",
    "UPDATE_API_TIMEOUT",
    "UPDATE_RELEASE_NOTES",
    "UpdateApiClient",
]

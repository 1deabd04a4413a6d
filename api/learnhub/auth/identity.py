"""Identity provider backend API client.

Only the profile metadata update is needed: user accounts, sessions and
token issuance live entirely in the identity provider.
"""

from typing import Any

import httpx
import structlog

from learnhub.config.settings import Settings
from learnhub.core.errors import ConfigurationError, UpstreamError


logger = structlog.get_logger(__name__)


class IdentityDirectoryClient:
    """Updates user records in the identity provider."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = settings.identity_api_url.rstrip("/")
        self._secret_key = settings.identity_secret_key
        self._timeout = settings.identity_request_timeout
        self._transport = transport

    async def update_public_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge `public_metadata` into the user's public metadata.

        Returns:
            The updated user as returned by the provider.

        Raises:
            ConfigurationError: If the backend API key is not configured.
            UpstreamError: If the provider rejects or fails the request.
        """
        if not self._secret_key:
            raise ConfigurationError("Identity provider secret key is not configured")

        url = f"{self._base_url}/users/{user_id}/metadata"
        headers = {
            "Authorization": f"Bearer {self._secret_key}",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.patch(
                    url, json={"public_metadata": public_metadata}, headers=headers
                )
        except httpx.TimeoutException as e:
            logger.error("identity_api_timeout", user_id=user_id, error=str(e))
            raise UpstreamError("Error updating user", "Identity provider timeout") from e
        except httpx.RequestError as e:
            logger.error("identity_api_request_error", user_id=user_id, error=str(e))
            raise UpstreamError("Error updating user", str(e)) from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "identity_api_request_failed",
                user_id=user_id,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise UpstreamError(
                "Error updating user",
                f"Identity provider error: {response.status_code}",
            )

        logger.info("identity_metadata_updated", user_id=user_id)
        return response.json()

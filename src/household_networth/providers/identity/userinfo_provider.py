"""Identity provider that resolves bearer tokens through an OIDC userinfo endpoint."""
import logging

import httpx

from household_networth.providers.core import (ExternalIdentity,
                                               IdentityProviderABC)

logger = logging.getLogger(__name__)


class UserInfoIdentityProvider(IdentityProviderABC):
    """Calls GET <userinfo_url> with the caller's bearer token.

    A 401/403 from the endpoint means the token is not valid; other failures
    are logged and also treated as "no identity" so auth fails closed.
    """

    def __init__(
        self,
        userinfo_url: str | None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._userinfo_url = userinfo_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def get_identity(self, token: str) -> ExternalIdentity | None:
        if not self._userinfo_url:
            logger.warning("AUTH_USERINFO_URL not configured; rejecting token")
            return None
        try:
            response = await self._client.get(
                self._userinfo_url, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as exc:
            logger.warning("Userinfo request failed: %s", exc)
            return None
        if response.status_code in (401, 403):
            return None
        if response.is_error:
            logger.warning("Userinfo endpoint returned %s", response.status_code)
            return None
        try:
            return ExternalIdentity.model_validate(response.json())
        except ValueError as exc:
            logger.warning("Userinfo response was not a valid identity: %s", exc)
            return None

    async def close(self) -> None:
        await self._client.aclose()

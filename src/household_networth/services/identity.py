"""Identity resolution: bearer credentials -> local User row."""
import asyncio
import logging

from household_networth.config import Settings
from household_networth.core.exceptions import UnauthenticatedError
from household_networth.db.models import User
from household_networth.db.storage import Storage
from household_networth.providers.core import IdentityProviderABC

logger = logging.getLogger(__name__)

DEV_USER_EMAIL = "dev@localhost"
DEV_USER_NAME = "Dev User"


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class IdentityResolver:
    """Turns request credentials into a User.

    With the development bypass enabled (never in production) every request
    resolves to one fixed development user. Otherwise the bearer token is
    exchanged with the identity provider and the email must be on the
    allow-list; an empty allow-list admits nobody.
    """

    def __init__(self, settings: Settings, provider: IdentityProviderABC) -> None:
        self._settings = settings
        self._provider = provider
        if settings.skip_auth and settings.is_production:
            logger.warning("SKIP_AUTH is ignored in production")

    @property
    def dev_mode(self) -> bool:
        return self._settings.dev_auth_enabled

    def is_allowed(self, email: str) -> bool:
        return email.strip().lower() in self._settings.allowed_emails

    def ensure_dev_user(self, storage: Storage) -> User:
        """Idempotent create-if-absent of the development user."""
        return storage.get_or_create_user(DEV_USER_EMAIL, DEV_USER_NAME)

    async def resolve(self, storage: Storage, authorization: str | None) -> User:
        if self.dev_mode:
            return await asyncio.to_thread(self.ensure_dev_user, storage)

        token = bearer_token(authorization)
        if token is None:
            raise UnauthenticatedError()

        identity = await self._provider.get_identity(token)
        if identity is None or not identity.email:
            logger.warning("Rejected token without a verified email")
            raise UnauthenticatedError()
        if not self.is_allowed(identity.email):
            logger.warning("Rejected %s: not on the allow-list", identity.email)
            raise UnauthenticatedError()

        return await asyncio.to_thread(
            storage.get_or_create_user, identity.email, identity.name
        )

    async def close(self) -> None:
        await self._provider.close()

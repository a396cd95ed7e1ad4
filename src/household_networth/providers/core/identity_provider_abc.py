"""Abstract base class for external identity providers."""
from abc import ABC, abstractmethod

from pydantic import BaseModel


class ExternalIdentity(BaseModel):
    """Identity asserted by the external auth provider for a bearer token."""

    email: str | None = None
    name: str | None = None


class IdentityProviderABC(ABC):
    """Exchanges a bearer token for an external identity."""

    @abstractmethod
    async def get_identity(self, token: str) -> ExternalIdentity | None:
        """Return the identity for token, or None when the token is not valid."""

    async def close(self) -> None:
        """Release network resources. Override if needed."""

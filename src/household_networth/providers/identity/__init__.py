"""External identity providers."""
from household_networth.providers.identity.userinfo_provider import \
    UserInfoIdentityProvider

__all__ = ["UserInfoIdentityProvider"]

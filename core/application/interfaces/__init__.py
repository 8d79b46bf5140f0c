"""Application layer interfaces."""
from abc import ABC, abstractmethod

from core.domain.value_objects import AuthenticatedUser


class IIdentityProvider(ABC):
    """
    Interface for resolving a bearer token to a caller identity.

    Session issuance lives with the auth service; this service only
    asks who the token belongs to.
    """

    @abstractmethod
    async def resolve(self, token: str) -> AuthenticatedUser:
        """
        Resolve an access token.

        Args:
            token: Bearer token from the Authorization header

        Returns:
            AuthenticatedUser for the token

        Raises:
            AuthError: If the token is missing, expired or rejected
            IdentityUnavailableError: If the provider cannot be reached
        """
        pass


__all__ = ["IIdentityProvider"]

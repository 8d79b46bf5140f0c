"""
Supabase Identity Provider.

Resolves a bearer token to a user by asking Supabase Auth.
"""
import asyncio
import logging

import aiohttp

from core.application.interfaces import IIdentityProvider
from core.domain.exceptions import AuthError, IdentityUnavailableError
from core.domain.value_objects import AuthenticatedUser
from core.settings.sections.supabase import SupabaseSettings


logger = logging.getLogger(__name__)


class SupabaseIdentityProvider(IIdentityProvider):
    """
    Supabase implementation of IIdentityProvider.

    Calls GET {SUPABASE_URL}/auth/v1/user with the caller's token.
    A rejected token is an AuthError (401); an unreachable or unconfigured
    provider is an IdentityUnavailableError (503). The token is never logged.
    """

    def __init__(self, settings: SupabaseSettings):
        self.settings = settings
        self.user_url = f"{settings.url.rstrip('/')}/auth/v1/user"
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)

    async def resolve(self, token: str) -> AuthenticatedUser:
        if not token:
            raise AuthError("Missing bearer token")
        if not self.settings.url:
            logger.error("SUPABASE_URL not configured, cannot resolve tokens")
            raise IdentityUnavailableError("Authentication is not configured")

        headers = {
            "Authorization": f"Bearer {token}",
            "apikey": self.settings.anon_key,
        }

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.user_url, headers=headers) as response:
                    if response.status >= 500:
                        logger.error(f"Supabase auth unavailable: HTTP {response.status}")
                        raise IdentityUnavailableError("Unable to verify token")
                    if response.status != 200:
                        logger.warning(f"Supabase rejected token: HTTP {response.status}")
                        raise AuthError("Invalid or expired token")
                    body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Supabase user lookup failed: {e}")
            raise IdentityUnavailableError("Unable to verify token") from e

        user_id = body.get("id") if isinstance(body, dict) else None
        if not user_id:
            raise AuthError("Invalid or expired token")

        return AuthenticatedUser(user_id=str(user_id), email=body.get("email"))

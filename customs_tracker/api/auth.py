"""
Bearer token verification against the hosted identity provider.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from ..utils.logger import get_logger
from ..core.exceptions import AuthenticationError


@dataclass
class AuthenticatedUser:
    """Identity verified for the current request."""

    id: str
    email: Optional[str] = None


class IdentityProvider:
    """
    Client for the identity provider's user endpoint.

    A token is valid when ``GET {auth_url}/auth/v1/user`` answers 200 with a
    user object; the service key is sent as the ``apikey`` header.
    """

    def __init__(
        self,
        auth_url: str,
        service_key: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.user_endpoint = f"{auth_url.rstrip('/')}/auth/v1/user"
        self.service_key = service_key
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None
        self.logger = get_logger(__name__)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def verify_token(self, token: str) -> AuthenticatedUser:
        """
        Resolve a bearer token to a user.

        Raises:
            AuthenticationError: the provider rejected the token or could not be reached
        """
        try:
            response = await self._get_client().get(
                self.user_endpoint,
                headers={"Authorization": f"Bearer {token}", "apikey": self.service_key}
            )
        except httpx.HTTPError as e:
            self.logger.error("Identity provider unreachable", extra={"error": str(e)})
            raise AuthenticationError("Authentication failed")

        if response.status_code != 200:
            self.logger.info("Token rejected", extra={"status_code": response.status_code})
            raise AuthenticationError("Invalid token")

        try:
            data = response.json()
        except ValueError:
            raise AuthenticationError("Invalid token")

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthenticationError("Invalid token")

        return AuthenticatedUser(id=str(user_id), email=data.get("email"))

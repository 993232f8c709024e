"""
Supabase Auth (GoTrue) client.

Used for:
- creating identities at sign-up (admin API, email auto-confirmed)
- password sign-in
- resolving a bearer token to its identity on every authenticated request
"""

import logging
from typing import Dict, Any, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """The identity provider rejected a request."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupabaseAuthClient:
    """Thin async wrapper around the GoTrue REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        anon_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.service_role_key = service_role_key or settings.supabase_service_role_key
        self.anon_key = anon_key or settings.supabase_anon_key or self.service_role_key
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=settings.auth_timeout_seconds,
            transport=self._transport,
        )

    def _admin_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
        }

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            payload = response.json()
        except ValueError:
            raise AuthProviderError(response.text or "Authentication failed", response.status_code)

        message = (
            payload.get("msg")
            or payload.get("error_description")
            or payload.get("message")
            or payload.get("error")
            or "Authentication failed"
        )
        raise AuthProviderError(str(message), response.status_code)

    async def create_user(
        self,
        email: str,
        password: str,
        user_metadata: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Create a confirmed identity through the admin API.

        Returns:
            The created user object
        """
        async with self._client() as client:
            response = await client.post(
                "/admin/users",
                headers=self._admin_headers(),
                json={
                    "email": email,
                    "password": password,
                    "user_metadata": user_metadata,
                    "email_confirm": True,
                },
            )

        self._raise_for_error(response)
        user = response.json()
        logger.info(f"Created auth identity {user.get('id')} for {email}")
        return user

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange email/password for a session.

        Returns:
            {"user": ..., "session": ...}
        """
        async with self._client() as client:
            response = await client.post(
                "/token",
                params={"grant_type": "password"},
                headers={"apikey": self.anon_key},
                json={"email": email, "password": password},
            )

        self._raise_for_error(response)
        session = response.json()
        user = session.get("user") or {}
        return {"user": user, "session": session}

    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Identity for a bearer token, or None if the token is rejected."""
        async with self._client() as client:
            response = await client.get(
                "/user",
                headers={
                    "apikey": self.anon_key,
                    "Authorization": f"Bearer {access_token}",
                },
            )

        if response.status_code in (401, 403):
            return None

        self._raise_for_error(response)
        user = response.json()
        return user if user.get("id") else None


# Global instance
_auth_client: Optional[SupabaseAuthClient] = None


def get_auth_client() -> SupabaseAuthClient:
    """Get the auth client singleton."""
    global _auth_client
    if _auth_client is None:
        _auth_client = SupabaseAuthClient()
    return _auth_client

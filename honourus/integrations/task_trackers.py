"""
OAuth clients for the task trackers users can connect (Jira, ClickUp).

Each provider knows how to:
- build the authorize URL the user is redirected to
- exchange an authorization code for tokens
- resolve the workspace the tokens belong to
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from urllib.parse import urlencode

import httpx

from config import settings

logger = logging.getLogger(__name__)


class OAuthProviderError(Exception):
    """Raised when a task tracker rejects an OAuth request."""
    pass


def _error_detail(response: httpx.Response, key: str) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        return str(payload.get(key) or payload.get("error") or payload)
    return str(payload)


class TaskTrackerOAuthProvider(ABC):
    """Shared plumbing for task tracker OAuth apps."""

    service: str = ""
    authorize_url: str = ""
    token_url: str = ""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.oauth_http_timeout_seconds,
            transport=self._transport,
        )

    @abstractmethod
    def build_authorize_url(self, redirect_uri: str, state: str) -> str:
        """URL the user is sent to for consent."""
        pass

    @abstractmethod
    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """Trade an authorization code for the token payload."""
        pass

    @abstractmethod
    async def fetch_workspace(self, access_token: str) -> Optional[Dict[str, Any]]:
        """First workspace reachable with the token, or None."""
        pass


class JiraOAuthProvider(TaskTrackerOAuthProvider):
    """Atlassian 3LO (OAuth 2.0) for Jira Cloud."""

    service = "jira"
    authorize_url = "https://auth.atlassian.com/authorize"
    token_url = "https://auth.atlassian.com/oauth/token"
    resources_url = "https://api.atlassian.com/oauth/token/accessible-resources"
    scopes = "read:jira-work read:jira-user offline_access"

    def build_authorize_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "audience": "api.atlassian.com",
            "client_id": self.client_id,
            "scope": self.scopes,
            "redirect_uri": redirect_uri,
            "state": state,
            "response_type": "code",
            "prompt": "consent",
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(
                self.token_url,
                json={
                    "grant_type": "authorization_code",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": redirect_uri,
                },
            )

        if not response.is_success:
            detail = _error_detail(response, "error_description")
            logger.error(f"Jira token exchange failed ({response.status_code}): {detail}")
            raise OAuthProviderError(f"Failed to exchange code for tokens: {detail}")

        return response.json()

    async def fetch_workspace(self, access_token: str) -> Optional[Dict[str, Any]]:
        """First Jira site the token can access."""
        async with self._client() as client:
            response = await client.get(
                self.resources_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )

        if not response.is_success:
            logger.warning(f"Jira accessible-resources returned {response.status_code}")
            return None

        resources = response.json()
        if not resources:
            return None

        site = resources[0]
        return {
            "workspace_id": site.get("id"),
            "workspace_name": site.get("name"),
            "workspace_url": site.get("url"),
        }


class ClickUpOAuthProvider(TaskTrackerOAuthProvider):
    """ClickUp OAuth app. ClickUp tokens do not expire and have no refresh token."""

    service = "clickup"
    authorize_url = "https://app.clickup.com/api"
    token_url = "https://api.clickup.com/api/v2/oauth/token"
    user_url = "https://api.clickup.com/api/v2/user"

    def build_authorize_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "response_type": "code",
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(
                self.token_url,
                json={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                },
            )

        if not response.is_success:
            detail = _error_detail(response, "err")
            logger.error(f"ClickUp token exchange failed ({response.status_code}): {detail}")
            raise OAuthProviderError(f"Failed to exchange code for tokens: {detail}")

        return response.json()

    async def fetch_workspace(self, access_token: str) -> Optional[Dict[str, Any]]:
        """First team (workspace) of the authorizing ClickUp user."""
        async with self._client() as client:
            response = await client.get(
                self.user_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )

        if not response.is_success:
            logger.warning(f"ClickUp user lookup returned {response.status_code}")
            return None

        teams = (response.json().get("user") or {}).get("teams") or []
        if not teams:
            return None

        team = teams[0]
        return {
            "workspace_id": team.get("id"),
            "workspace_name": team.get("name"),
            "workspace_url": f"https://app.clickup.com/{team.get('id')}",
        }


SUPPORTED_SERVICES = ("jira", "clickup")


def get_provider(
    service: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TaskTrackerOAuthProvider:
    """
    Build the OAuth provider for a service name.

    Raises:
        OAuthProviderError: Unknown service
    """
    if service == "jira":
        return JiraOAuthProvider(
            settings.jira_client_id, settings.jira_client_secret, transport=transport
        )
    if service == "clickup":
        return ClickUpOAuthProvider(
            settings.clickup_client_id, settings.clickup_client_secret, transport=transport
        )
    raise OAuthProviderError(f"Unsupported service: {service}")

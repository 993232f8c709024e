"""
Tests for the task tracker connect/callback flow (services/oauth_flow.py).
"""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, Mock, patch

import httpx

from honourus.integrations.task_trackers import OAuthProviderError
from honourus.services.oauth_flow import OAuthFlowError, complete_callback, start_connect
from honourus.utils.datetime_utils import utc_now


@pytest.fixture
def state_repo():
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.get = AsyncMock(return_value=Mock(
        redirect_uri="https://app.example.com/cb",
        expires_at=utc_now() + timedelta(minutes=10),
    ))
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def integration_repo():
    repo = AsyncMock()
    repo.upsert = AsyncMock(return_value=Mock(name="integration"))
    return repo


@pytest.fixture
def patched_repos(state_repo, integration_repo):
    with patch("honourus.services.oauth_flow.get_oauth_state_repository", return_value=state_repo), \
         patch("honourus.services.oauth_flow.get_integration_repository", return_value=integration_repo):
        yield state_repo, integration_repo


def jira_transport(token_status=200, sites=None):
    sites = [{"id": "site-1", "name": "Acme", "url": "https://acme.atlassian.net"}] if sites is None else sites

    def handler(request: httpx.Request):
        if request.url.path == "/oauth/token":
            if token_status != 200:
                return httpx.Response(token_status, json={"error_description": "invalid grant"})
            return httpx.Response(200, json={"access_token": "at", "refresh_token": "rt", "expires_in": 3600})
        return httpx.Response(200, json=sites)

    return httpx.MockTransport(handler)


class TestStartConnect:

    @pytest.mark.asyncio
    async def test_stores_state_and_returns_url(self, patched_repos):
        state_repo, _ = patched_repos

        url = await start_connect("jira", "user_a", "https://app.example.com/cb")

        state_repo.create.assert_awaited_once()
        kwargs = state_repo.create.call_args.kwargs
        assert kwargs["user_id"] == "user_a"
        assert kwargs["service"] == "jira"
        assert kwargs["redirect_uri"] == "https://app.example.com/cb"
        assert f"state={kwargs['state']}" in url
        assert url.startswith("https://auth.atlassian.com/authorize?")

    @pytest.mark.asyncio
    async def test_state_expires_in_fifteen_minutes(self, patched_repos):
        state_repo, _ = patched_repos
        before = utc_now()

        await start_connect("clickup", "user_a", "https://cb")

        expires_at = state_repo.create.call_args.kwargs["expires_at"]
        assert timedelta(minutes=14) < expires_at - before <= timedelta(minutes=15, seconds=5)

    @pytest.mark.asyncio
    async def test_unknown_service(self, patched_repos):
        state_repo, _ = patched_repos
        with pytest.raises(OAuthProviderError):
            await start_connect("asana", "user_a", "https://cb")
        state_repo.create.assert_not_awaited()


class TestCompleteCallback:

    @pytest.mark.asyncio
    async def test_success_upserts_then_consumes_state(self, patched_repos):
        state_repo, integration_repo = patched_repos
        calls = []
        integration_repo.upsert.side_effect = lambda **kw: calls.append("upsert") or Mock()
        state_repo.delete.side_effect = lambda state: calls.append("delete")

        await complete_callback("jira", "code", "st", "user_a", transport=jira_transport())

        assert calls == ["upsert", "delete"]
        kwargs = integration_repo.upsert.call_args.kwargs
        assert kwargs["access_token"] == "at"
        assert kwargs["refresh_token"] == "rt"
        assert kwargs["expires_in"] == 3600
        assert kwargs["workspace"]["workspace_id"] == "site-1"
        state_repo.delete.assert_awaited_once_with("st")

    @pytest.mark.asyncio
    async def test_unknown_state(self, patched_repos):
        state_repo, integration_repo = patched_repos
        state_repo.get.return_value = None

        with pytest.raises(OAuthFlowError, match="Invalid state parameter"):
            await complete_callback("jira", "code", "nope", "user_a", transport=jira_transport())

        integration_repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_state(self, patched_repos):
        state_repo, integration_repo = patched_repos
        state_repo.get.return_value = Mock(redirect_uri="https://cb", expires_at=utc_now() - timedelta(seconds=1))

        with pytest.raises(OAuthFlowError, match="OAuth state has expired"):
            await complete_callback("jira", "code", "st", "user_a", transport=jira_transport())

        integration_repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_exchange_rejected_keeps_state(self, patched_repos):
        state_repo, integration_repo = patched_repos

        with pytest.raises(OAuthProviderError, match="Failed to exchange code for tokens"):
            await complete_callback("jira", "code", "st", "user_a", transport=jira_transport(token_status=400))

        integration_repo.upsert.assert_not_awaited()
        state_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_workspace(self, patched_repos):
        state_repo, integration_repo = patched_repos

        with pytest.raises(OAuthFlowError, match="workspace"):
            await complete_callback("jira", "code", "st", "user_a", transport=jira_transport(sites=[]))

        integration_repo.upsert.assert_not_awaited()
        state_repo.delete.assert_not_awaited()

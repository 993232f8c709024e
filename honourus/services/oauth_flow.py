"""
Task tracker connection flow.

connect:  store a short-lived state, hand back the provider's authorize URL
callback: verify state -> exchange code -> resolve workspace -> upsert
          integration -> consume state

Nothing is rolled back when a later step fails; an unconsumed state simply
expires.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

import httpx

from config import settings
from ..database.models import IntegrationDB
from ..database.repositories import (
    get_integration_repository,
    get_oauth_state_repository,
)
from ..integrations.task_trackers import get_provider
from ..utils.datetime_utils import utc_now, to_aware_utc

logger = logging.getLogger(__name__)


class OAuthFlowError(Exception):
    """A connect or callback step failed."""
    pass


async def start_connect(
    service: str,
    user_id: str,
    redirect_uri: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Begin connecting a task tracker.

    Returns:
        The provider authorize URL to redirect the user to
    """
    provider = get_provider(service, transport=transport)

    state = secrets.token_urlsafe(32)
    expires_at = utc_now() + timedelta(minutes=settings.oauth_state_ttl_minutes)

    await get_oauth_state_repository().create(
        state=state,
        user_id=user_id,
        service=service,
        redirect_uri=redirect_uri,
        expires_at=expires_at,
    )

    logger.info(f"Started {service} connect for {user_id}")
    return provider.build_authorize_url(redirect_uri, state)


async def complete_callback(
    service: str,
    code: str,
    state: str,
    user_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> IntegrationDB:
    """
    Finish the OAuth dance and persist the integration.

    Raises:
        OAuthFlowError: Unknown/expired state or no workspace on the account
        OAuthProviderError: Token exchange rejected by the provider
        DatabaseOperationError: Integration could not be stored
    """
    provider = get_provider(service, transport=transport)
    states = get_oauth_state_repository()

    pending = await states.get(state, user_id, service)
    if pending is None:
        raise OAuthFlowError("Invalid state parameter")

    if to_aware_utc(pending.expires_at) < utc_now():
        raise OAuthFlowError("OAuth state has expired")

    tokens = await provider.exchange_code(code, pending.redirect_uri)
    access_token = tokens.get("access_token")
    if not access_token:
        raise OAuthFlowError("Failed to exchange code for tokens: no access token returned")

    workspace = await provider.fetch_workspace(access_token)
    if not workspace or not workspace.get("workspace_id"):
        raise OAuthFlowError(f"No {service} workspace is available for this account")

    integration = await get_integration_repository().upsert(
        user_id=user_id,
        service=service,
        access_token=access_token,
        refresh_token=tokens.get("refresh_token"),
        expires_in=tokens.get("expires_in"),
        workspace=workspace,
    )

    await states.delete(state)

    logger.info(f"Connected {service} workspace {workspace.get('workspace_name')} for {user_id}")
    return integration

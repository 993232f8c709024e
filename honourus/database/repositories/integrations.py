"""
Repository for task tracker integrations (Jira, ClickUp).

Stores OAuth credentials per (user, service). Tokens are encrypted with
Fernet before storage.
"""

import copy
import logging
from typing import Optional, List, Dict, Any
from datetime import timedelta
from sqlalchemy import select, and_

from ..models import IntegrationDB
from ..connection import get_database
from ..exceptions import DatabaseOperationError
from ...utils.datetime_utils import utc_now
from ...utils.encryption import get_token_encryption

logger = logging.getLogger(__name__)

DEFAULT_INTEGRATION_SETTINGS: Dict[str, Any] = {
    "status_mappings": {},
    "credit_rules": [],
    "selected_projects": [],
}


class IntegrationRepository:
    """Repository for integration operations."""

    def __init__(self):
        self.db = get_database()

    async def upsert(
        self,
        user_id: str,
        service: str,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in: Optional[int] = None,
        workspace: Optional[Dict[str, Any]] = None,
    ) -> IntegrationDB:
        """
        Store or replace the integration for a user/service combination.

        Reconnecting reactivates the integration and resets its settings.

        Args:
            user_id: Honourus user id
            service: 'jira' or 'clickup'
            access_token: OAuth access token
            refresh_token: OAuth refresh token (ClickUp does not issue one)
            expires_in: Seconds until the access token expires
            workspace: workspace_id / workspace_name / workspace_url
        """
        workspace = workspace or {}
        encryption = get_token_encryption()
        encrypted_access = encryption.encrypt(access_token)
        encrypted_refresh = encryption.encrypt(refresh_token) if refresh_token else None

        expires_at = None
        if expires_in:
            expires_at = utc_now() + timedelta(seconds=expires_in)

        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(IntegrationDB).where(
                        and_(
                            IntegrationDB.user_id == user_id,
                            IntegrationDB.service == service,
                        )
                    )
                )
                integration = result.scalar_one_or_none()

                if integration is None:
                    integration = IntegrationDB(
                        user_id=user_id,
                        service=service,
                        created_at=utc_now(),
                    )
                    session.add(integration)
                    logger.info(f"Stored new encrypted {service} integration for {user_id}")
                else:
                    logger.info(f"Updated encrypted {service} integration for {user_id}")

                integration.access_token = encrypted_access
                integration.refresh_token = encrypted_refresh
                integration.expires_at = expires_at
                integration.workspace_id = str(workspace.get("workspace_id") or "")
                integration.workspace_name = workspace.get("workspace_name") or ""
                integration.workspace_url = workspace.get("workspace_url")
                integration.settings = copy.deepcopy(DEFAULT_INTEGRATION_SETTINGS)
                integration.is_active = True
                integration.updated_at = utc_now()

                await session.flush()
                return integration

        except Exception as e:
            logger.error(f"Error storing {service} integration for {user_id}: {e}")
            raise DatabaseOperationError(f"Failed to save integration: {e}")

    async def get_active(self, user_id: str) -> List[IntegrationDB]:
        """Active integrations for a user."""
        async with self.db.session() as session:
            result = await session.execute(
                select(IntegrationDB).where(
                    and_(
                        IntegrationDB.user_id == user_id,
                        IntegrationDB.is_active.is_(True),
                    )
                )
            )
            return list(result.scalars().all())

    async def update_settings(
        self,
        user_id: str,
        service: str,
        new_settings: Dict[str, Any],
    ) -> Optional[IntegrationDB]:
        """Replace the settings of an active integration. None if not connected."""
        async with self.db.session() as session:
            integration = await self._get_active_one(session, user_id, service)
            if not integration:
                return None

            integration.settings = {**copy.deepcopy(DEFAULT_INTEGRATION_SETTINGS), **new_settings}
            integration.updated_at = utc_now()
            await session.flush()

            logger.info(f"Updated {service} integration settings for {user_id}")
            return integration

    async def deactivate(self, user_id: str, service: str) -> bool:
        """Disconnect an integration (kept as an inactive row)."""
        async with self.db.session() as session:
            integration = await self._get_active_one(session, user_id, service)
            if not integration:
                return False

            integration.is_active = False
            integration.updated_at = utc_now()

            logger.info(f"Disconnected {service} integration for {user_id}")
            return True

    @staticmethod
    async def _get_active_one(session, user_id: str, service: str) -> Optional[IntegrationDB]:
        result = await session.execute(
            select(IntegrationDB).where(
                and_(
                    IntegrationDB.user_id == user_id,
                    IntegrationDB.service == service,
                    IntegrationDB.is_active.is_(True),
                )
            )
        )
        return result.scalar_one_or_none()


# Singleton instance
_integration_repo: Optional[IntegrationRepository] = None


def get_integration_repository() -> IntegrationRepository:
    """Get the integration repository singleton."""
    global _integration_repo
    if _integration_repo is None:
        _integration_repo = IntegrationRepository()
    return _integration_repo

"""
Repository for pending OAuth authorization states.

A state is written before the user is redirected to the provider and is
deleted once the callback has persisted the integration. Expired rows are
never cleaned up actively; lookups simply ignore them.
"""

import logging
from typing import Optional
from datetime import datetime
from sqlalchemy import select, delete, and_

from ..models import OAuthStateDB
from ..connection import get_database
from ..exceptions import DatabaseOperationError
from ...utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class OAuthStateRepository:
    """Repository for OAuth state operations."""

    def __init__(self):
        self.db = get_database()

    async def create(
        self,
        state: str,
        user_id: str,
        service: str,
        redirect_uri: str,
        expires_at: datetime,
    ) -> OAuthStateDB:
        """Record a pending authorization."""
        try:
            async with self.db.session() as session:
                row = OAuthStateDB(
                    state=state,
                    user_id=user_id,
                    service=service,
                    redirect_uri=redirect_uri,
                    expires_at=expires_at,
                    created_at=utc_now(),
                )
                session.add(row)
                await session.flush()

                logger.info(f"Stored {service} OAuth state for {user_id}")
                return row

        except Exception as e:
            logger.error(f"Error storing OAuth state: {e}")
            raise DatabaseOperationError(f"Failed to store OAuth state: {e}")

    async def get(self, state: str, user_id: str, service: str) -> Optional[OAuthStateDB]:
        """Look up a state issued to this user for this service."""
        async with self.db.session() as session:
            result = await session.execute(
                select(OAuthStateDB).where(
                    and_(
                        OAuthStateDB.state == state,
                        OAuthStateDB.user_id == user_id,
                        OAuthStateDB.service == service,
                    )
                )
            )
            return result.scalar_one_or_none()

    async def delete(self, state: str) -> None:
        """Consume a state after a successful callback."""
        async with self.db.session() as session:
            await session.execute(
                delete(OAuthStateDB).where(OAuthStateDB.state == state)
            )
            logger.info("Consumed OAuth state")


# Singleton instance
_oauth_state_repo: Optional[OAuthStateRepository] = None


def get_oauth_state_repository() -> OAuthStateRepository:
    """Get the OAuth state repository singleton."""
    global _oauth_state_repo
    if _oauth_state_repo is None:
        _oauth_state_repo = OAuthStateRepository()
    return _oauth_state_repo

"""
Team repository.

A team is created by a user who becomes its leader and only member.
"""

import logging
from typing import Optional, List

from sqlalchemy import select

from ..connection import get_database
from ..models import TeamDB
from ..exceptions import DatabaseOperationError
from ...utils.datetime_utils import utc_now
from ...utils.ids import generate_id

logger = logging.getLogger(__name__)


class TeamRepository:
    """Repository for team operations."""

    def __init__(self):
        self.db = get_database()

    async def create(self, name: str, leader_id: str, description: str = "") -> TeamDB:
        """Create a team led by ``leader_id``."""
        async with self.db.session() as session:
            try:
                team = TeamDB(
                    id=generate_id("team"),
                    name=name,
                    description=description or "",
                    leader_id=leader_id,
                    member_ids=[leader_id],
                    channel_ids=[],
                    created_at=utc_now(),
                )
                session.add(team)
                await session.flush()

                logger.info(f"Created team {team.id} ({name}) led by {leader_id}")
                return team

            except Exception as e:
                logger.error(f"CRITICAL: Team creation failed for {name}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to create team {name}: {e}")

    async def get_all(self) -> List[TeamDB]:
        """All teams, oldest first."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TeamDB).order_by(TeamDB.created_at)
            )
            return list(result.scalars().all())


# Singleton instance
_team_repo: Optional[TeamRepository] = None


def get_team_repository() -> TeamRepository:
    """Get the team repository singleton."""
    global _team_repo
    if _team_repo is None:
        _team_repo = TeamRepository()
    return _team_repo

"""
Recognition repository.

Recognitions are immutable. Creating one credits the recipient in the same
transaction.
"""

import logging
from typing import Optional, List, Tuple
from datetime import datetime

from sqlalchemy import select, func

from ..connection import get_database
from ..models import RecognitionDB, ActivityTypeEnum
from ..exceptions import DatabaseOperationError
from .users import add_credits
from ...utils.datetime_utils import utc_now
from ...utils.ids import generate_id

logger = logging.getLogger(__name__)


class RecognitionRepository:
    """Repository for recognition operations."""

    def __init__(self):
        self.db = get_database()

    async def create(
        self,
        from_user_id: str,
        to_user_id: str,
        message: str,
        credits: int,
        recognition_type: str,
    ) -> RecognitionDB:
        """Persist a recognition and add its credits to the recipient."""
        async with self.db.session() as session:
            try:
                recognition = RecognitionDB(
                    id=generate_id("recognition"),
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    message=message,
                    credits=credits,
                    recognition_type=recognition_type,
                    created_at=utc_now(),
                )
                session.add(recognition)

                await add_credits(
                    session,
                    user_id=to_user_id,
                    amount=credits,
                    activity_type=ActivityTypeEnum.RECOGNITION_RECEIVED.value,
                    details={
                        "recognition_id": recognition.id,
                        "from_user_id": from_user_id,
                        "type": recognition_type,
                    },
                )
                await session.flush()

                logger.info(f"Recognition {recognition.id}: {from_user_id} -> {to_user_id} ({credits} credits)")
                return recognition

            except Exception as e:
                logger.error(f"CRITICAL: Recognition creation failed: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to create recognition: {e}")

    async def get_all(self) -> List[RecognitionDB]:
        """All recognitions, newest first."""
        async with self.db.session() as session:
            result = await session.execute(
                select(RecognitionDB).order_by(RecognitionDB.created_at.desc())
            )
            return list(result.scalars().all())

    async def count_received(self, user_id: str) -> int:
        """Number of recognitions a user has received."""
        async with self.db.session() as session:
            result = await session.execute(
                select(func.count(RecognitionDB.id)).where(RecognitionDB.to_user_id == user_id)
            )
            return result.scalar() or 0

    async def get_received_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> List[Tuple[datetime, int]]:
        """(created_at, credits) of recognitions received in [start, end)."""
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(RecognitionDB.created_at, RecognitionDB.credits).where(
                        RecognitionDB.to_user_id == user_id,
                        RecognitionDB.created_at >= start,
                        RecognitionDB.created_at < end,
                    )
                )
                return [(row[0], row[1]) for row in result.all()]
        except Exception as e:
            raise DatabaseOperationError(f"Failed to fetch recognitions: {e}")


# Singleton instance
_recognition_repo: Optional[RecognitionRepository] = None


def get_recognition_repository() -> RecognitionRepository:
    """Get the recognition repository singleton."""
    global _recognition_repo
    if _recognition_repo is None:
        _recognition_repo = RecognitionRepository()
    return _recognition_repo

"""
User repository.

Stores workspace profiles for:
- Sign-up / sign-in user data
- Profile reads and updates
- Credit counter and credit ledger
"""

import logging
from typing import Optional, List, Dict, Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..connection import get_database
from ..models import UserDB, ActivityLogDB
from ..exceptions import DatabaseConstraintError, DatabaseOperationError
from ...utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


async def add_credits(
    session: AsyncSession,
    user_id: str,
    amount: int,
    activity_type: str,
    details: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Atomically add credits to a user and append a ledger entry.

    Runs inside the caller's session so the award commits together with
    the write that triggered it.

    Returns:
        True if the user exists and was credited
    """
    result = await session.execute(
        update(UserDB)
        .where(UserDB.id == user_id)
        .values(credits=UserDB.credits + amount, updated_at=utc_now())
    )

    if not result.rowcount:
        logger.warning(f"Credit award skipped: user {user_id} has no profile row")
        return False

    session.add(
        ActivityLogDB(
            user_id=user_id,
            activity_type=activity_type,
            details=details or {},
            credits_earned=amount,
        )
    )
    logger.info(f"Awarded {amount} credits to {user_id} ({activity_type})")
    return True


class UserRepository:
    """Repository for user profile operations."""

    def __init__(self):
        self.db = get_database()

    async def create(
        self,
        user_id: str,
        name: str,
        email: str,
        role: str = "member",
        department: Optional[str] = None,
    ) -> UserDB:
        """Create the profile row for a freshly signed-up identity."""
        async with self.db.session() as session:
            try:
                user = UserDB(
                    id=user_id,
                    name=name,
                    email=email,
                    role=role,
                    department=department,
                    credits=0,
                    created_at=utc_now(),
                    updated_at=utc_now(),
                )
                session.add(user)
                await session.flush()

                logger.info(f"Created user profile {user_id} ({email})")
                return user

            except IntegrityError as e:
                logger.error(f"Constraint violation creating user {email}: {e}")
                raise DatabaseConstraintError(f"Cannot create user {email}: duplicate or constraint violation")

            except Exception as e:
                logger.error(f"CRITICAL: User creation failed for {email}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to create user {email}: {e}")

    async def get_by_id(self, user_id: str) -> Optional[UserDB]:
        """Get user by id."""
        async with self.db.session() as session:
            result = await session.execute(
                select(UserDB).where(UserDB.id == user_id)
            )
            return result.scalar_one_or_none()

    async def update(self, user_id: str, updates: Dict[str, Any]) -> Optional[UserDB]:
        """Update profile fields. Returns None if the user does not exist."""
        async with self.db.session() as session:
            result = await session.execute(
                select(UserDB).where(UserDB.id == user_id)
            )
            user = result.scalar_one_or_none()
            if not user:
                return None

            for field, value in updates.items():
                setattr(user, field, value)
            user.updated_at = utc_now()

            await session.flush()
            logger.info(f"Updated user {user_id}: {list(updates.keys())}")
            return user

    async def get_activity(self, user_id: str, limit: int = 50) -> List[ActivityLogDB]:
        """Most recent credit ledger entries for a user."""
        async with self.db.session() as session:
            result = await session.execute(
                select(ActivityLogDB)
                .where(ActivityLogDB.user_id == user_id)
                .order_by(ActivityLogDB.created_at.desc(), ActivityLogDB.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())


# Singleton instance
_user_repo: Optional[UserRepository] = None


def get_user_repository() -> UserRepository:
    """Get the user repository singleton."""
    global _user_repo
    if _user_repo is None:
        _user_repo = UserRepository()
    return _user_repo

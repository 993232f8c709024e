"""
Task repository.

Handles:
- Task CRUD operations
- Status updates with credit awarding on completion
- Read models for the analytics functions
"""

import logging
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime

from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import IntegrityError

from config import settings
from ..connection import get_database
from ..models import TaskDB, ActivityTypeEnum
from ..exceptions import (
    DatabaseConstraintError,
    DatabaseOperationError,
    EntityNotFoundError,
)
from .users import add_credits
from ...services.credits import should_award_task_credits, COMPLETED
from ...utils.datetime_utils import utc_now
from ...utils.ids import generate_id

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for task operations."""

    def __init__(self):
        self.db = get_database()

    # ==================== TASK CRUD ====================

    async def create(self, task_data: Dict[str, Any], created_by: str) -> TaskDB:
        """Create a new task. Proof always starts out not uploaded."""
        async with self.db.session() as session:
            try:
                now = utc_now()
                task = TaskDB(
                    id=generate_id("task"),
                    title=task_data["title"],
                    description=task_data.get("description") or "",
                    task_type=task_data.get("task_type", "feature"),
                    priority=task_data.get("priority", "medium"),
                    status=task_data.get("status", "todo"),
                    assignee_id=task_data.get("assignee_id"),
                    reviewer_id=task_data.get("reviewer_id"),
                    team_id=task_data.get("team_id"),
                    created_by=created_by,
                    credits=task_data.get("credits", 0),
                    requires_proof=task_data.get("requires_proof", False),
                    proof_uploaded=False,
                    tags=task_data.get("tags") or [],
                    due_date=task_data.get("due_date"),
                    created_at=now,
                    updated_at=now,
                )
                session.add(task)
                await session.flush()

                logger.info(f"Created task {task.id} by {created_by}")
                return task

            except IntegrityError as e:
                logger.error(f"Constraint violation creating task: {e}")
                raise DatabaseConstraintError(f"Cannot create task '{task_data.get('title')}': constraint violation")

            except Exception as e:
                logger.error(f"CRITICAL: Task creation failed: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to create task: {e}")

    async def get_by_id(self, task_id: str) -> Optional[TaskDB]:
        """Get task by id."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDB).where(TaskDB.id == task_id)
            )
            return result.scalar_one_or_none()

    async def get_all(
        self,
        status: Optional[str] = None,
        assignee_id: Optional[str] = None,
    ) -> List[TaskDB]:
        """Get all tasks, optionally filtered, newest first."""
        async with self.db.session() as session:
            query = select(TaskDB)
            if status:
                query = query.where(TaskDB.status == status)
            if assignee_id:
                query = query.where(TaskDB.assignee_id == assignee_id)

            result = await session.execute(query.order_by(TaskDB.created_at.desc()))
            return list(result.scalars().all())

    async def get_for_user(self, user_id: str) -> List[TaskDB]:
        """Tasks assigned to or created by a user."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDB).where(
                    or_(TaskDB.assignee_id == user_id, TaskDB.created_by == user_id)
                )
            )
            return list(result.scalars().all())

    async def update(
        self,
        task_id: str,
        updates: Dict[str, Any],
        acting_user_id: str,
    ) -> Tuple[TaskDB, bool]:
        """
        Apply a partial update and award credits on completion.

        The task row is locked for the duration of the transaction so the
        completion award is decided against the stored (pre-update) record
        exactly once. Credits go to the assignee, or to the acting user
        when the task has no assignee.

        Returns:
            (updated task, whether credits were awarded)
        """
        async with self.db.session() as session:
            try:
                result = await session.execute(
                    select(TaskDB).where(TaskDB.id == task_id).with_for_update()
                )
                task = result.scalar_one_or_none()

                if not task:
                    raise EntityNotFoundError(f"Task {task_id} not found")

                previous_status = task.status
                award = should_award_task_credits(
                    previous_status=previous_status,
                    new_status=updates.get("status"),
                    requires_proof=bool(task.requires_proof),
                    proof_uploaded=bool(task.proof_uploaded),
                    award_without_proof=settings.award_credits_without_proof,
                )
                credits_before = task.credits or 0
                recipient = task.assignee_id or acting_user_id

                now = utc_now()
                for field, value in updates.items():
                    setattr(task, field, value)
                task.updated_at = now
                if task.status == COMPLETED and previous_status != COMPLETED:
                    task.completed_at = now

                awarded = False
                if award and credits_before > 0:
                    awarded = await add_credits(
                        session,
                        user_id=recipient,
                        amount=credits_before,
                        activity_type=ActivityTypeEnum.TASK_COMPLETED.value,
                        details={"task_id": task.id, "title": task.title},
                    )

                await session.flush()
                logger.info(f"Updated task {task_id}: {list(updates.keys())} (credits awarded: {awarded})")
                return task, awarded

            except EntityNotFoundError:
                raise

            except IntegrityError as e:
                logger.error(f"Constraint violation updating task {task_id}: {e}")
                raise DatabaseConstraintError(f"Cannot update task {task_id}: constraint violation")

            except Exception as e:
                logger.error(f"CRITICAL: Task update failed for {task_id}: {e}", exc_info=True)
                raise DatabaseOperationError(f"Failed to update task {task_id}: {e}")

    # ==================== ANALYTICS READS ====================

    async def get_report_rows(
        self,
        team_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Tasks joined with assignee identity, for the unsung hero report.

        Filters on created_at, inclusive on both ends.
        """
        try:
            async with self.db.session() as session:
                query = select(TaskDB).options(selectinload(TaskDB.assignee))
                if team_id:
                    query = query.where(TaskDB.team_id == team_id)
                if date_from:
                    query = query.where(TaskDB.created_at >= date_from)
                if date_to:
                    query = query.where(TaskDB.created_at <= date_to)

                result = await session.execute(query.order_by(TaskDB.created_at))
                return [
                    {
                        "id": task.id,
                        "title": task.title,
                        "status": task.status,
                        "priority": task.priority,
                        "assignee_id": task.assignee_id,
                        "assignee_name": task.assignee.name if task.assignee else None,
                        "credits": task.credits,
                        "tags": task.tags or [],
                        "created_at": task.created_at,
                        "updated_at": task.updated_at,
                    }
                    for task in result.scalars().all()
                ]
        except Exception as e:
            raise DatabaseOperationError(f"Failed to fetch tasks: {e}")

    async def get_completed_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> List[Tuple[datetime, int]]:
        """(updated_at, credits) of a user's completed tasks in [start, end)."""
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(TaskDB.updated_at, TaskDB.credits).where(
                        TaskDB.assignee_id == user_id,
                        TaskDB.status == COMPLETED,
                        TaskDB.updated_at >= start,
                        TaskDB.updated_at < end,
                    )
                )
                return [(row[0], row[1]) for row in result.all()]
        except Exception as e:
            raise DatabaseOperationError(f"Failed to fetch tasks: {e}")


# Singleton instance
_task_repo: Optional[TaskRepository] = None


def get_task_repository() -> TaskRepository:
    """Get the task repository singleton."""
    global _task_repo
    if _task_repo is None:
        _task_repo = TaskRepository()
    return _task_repo

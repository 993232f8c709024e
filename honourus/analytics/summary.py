"""
Personal analytics summary shown on the dashboard.
"""

import logging
import math
from typing import Any, Dict, Iterable

from ..database.repositories import (
    get_task_repository,
    get_recognition_repository,
    get_user_repository,
)

logger = logging.getLogger(__name__)

COMPLETED = "completed"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_user_summary(
    task_statuses: Iterable[str],
    credits: int,
    recognitions_received: int,
) -> Dict[str, int]:
    """
    Summarize a user's tasks and recognitions.

    Args:
        task_statuses: Statuses of tasks assigned to or created by the user
        credits: Stored credit counter
        recognitions_received: Number of recognitions received
    """
    statuses = list(task_statuses)
    completed = sum(1 for status in statuses if status == COMPLETED)

    return {
        "tasksCompleted": completed,
        "creditsEarned": credits or 0,
        "recognitionsReceived": recognitions_received,
        "teamPerformance": _round_half_up(completed / max(len(statuses), 1) * 100),
        "productivityScore": _round_half_up((completed * 0.6 + recognitions_received * 0.4) * 10),
    }


async def get_user_analytics(user_id: str) -> Dict[str, Any]:
    tasks = await get_task_repository().get_for_user(user_id)
    user = await get_user_repository().get_by_id(user_id)
    received = await get_recognition_repository().count_received(user_id)

    logger.debug(f"Analytics for {user_id}: {len(tasks)} tasks, {received} recognitions")
    return build_user_summary(
        (task.status for task in tasks),
        user.credits if user else 0,
        received,
    )

"""
Unsung hero report.

Folds tasks into per-assignee statistics and ranks people by a composite of
completion rate, task volume and task-type diversity. The aim is to surface
contributors who do steady, varied work without necessarily collecting many
recognitions.

    score = 0.4 * completion_rate + 0.3 * total_tasks + 0.3 * tag_count

tag_count is the number of task types kept in the report (top 5 by count).
Equal scores are ordered by user_id ascending.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pytz

from ..database.repositories import get_task_repository
from ..utils.datetime_utils import isoformat_utc, to_aware_utc

logger = logging.getLogger(__name__)

COMPLETED = "completed"
TOP_TASK_TYPES = 5
RECENT_ACHIEVEMENTS = 5
UNKNOWN_USER = "Unknown User"

_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


def unsung_hero_score(completion_rate: float, total_tasks: int, tag_count: int) -> float:
    return completion_rate * 0.4 + total_tasks * 0.3 + tag_count * 0.3


def _new_stats(user_id: str, user_name: Optional[str]) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "user_name": user_name or UNKNOWN_USER,
        "total_tasks": 0,
        "completed_tasks": 0,
        "total_credits": 0,
        "task_types": {},
        "achievements": [],
    }


def _finalize(stats: Dict[str, Any]) -> Dict[str, Any]:
    total = stats["total_tasks"]
    completed = stats["completed_tasks"]

    # sorted() is stable, so equal counts keep first-seen order
    task_types = sorted(
        (
            {
                "tag": tag,
                "count": data["count"],
                "completion_rate": (data["completed"] / data["count"]) * 100 if data["count"] else 0,
            }
            for tag, data in stats["task_types"].items()
        ),
        key=lambda item: item["count"],
        reverse=True,
    )[:TOP_TASK_TYPES]

    achievements = sorted(
        stats["achievements"],
        key=lambda item: to_aware_utc(item["completed_at"]) or _EPOCH,
        reverse=True,
    )[:RECENT_ACHIEVEMENTS]

    return {
        "user_id": stats["user_id"],
        "user_name": stats["user_name"],
        "total_tasks": total,
        "completed_tasks": completed,
        "completion_rate": (completed / total) * 100 if total else 0,
        "total_credits": stats["total_credits"],
        "avg_task_credits": stats["total_credits"] / total if total else 0,
        "task_types": task_types,
        "recent_achievements": [
            {
                "task_title": item["task_title"],
                "credits": item["credits"],
                "completed_at": isoformat_utc(item["completed_at"]),
            }
            for item in achievements
        ],
    }


def build_unsung_hero_report(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Build the ranked report from task rows.

    Args:
        tasks: Rows with id, title, status, assignee_id, assignee_name,
               credits, tags and updated_at

    Returns:
        One entry per assignee, highest score first
    """
    per_user: Dict[str, Dict[str, Any]] = {}

    for task in tasks:
        user_id = task.get("assignee_id")
        # Unassigned tasks have no one to credit, so they get no row.
        if not user_id:
            continue

        stats = per_user.get(user_id)
        if stats is None:
            stats = _new_stats(user_id, task.get("assignee_name"))
            per_user[user_id] = stats

        credits = task.get("credits") or 0
        is_completed = task.get("status") == COMPLETED

        stats["total_tasks"] += 1
        stats["total_credits"] += credits

        if is_completed:
            stats["completed_tasks"] += 1
            stats["achievements"].append({
                "task_title": task.get("title"),
                "credits": credits,
                "completed_at": task.get("updated_at"),
            })

        for tag in task.get("tags") or []:
            tag_stats = stats["task_types"].setdefault(tag, {"count": 0, "completed": 0})
            tag_stats["count"] += 1
            if is_completed:
                tag_stats["completed"] += 1

    report = [_finalize(stats) for stats in per_user.values()]
    report.sort(
        key=lambda entry: (
            -unsung_hero_score(
                entry["completion_rate"],
                entry["total_tasks"],
                len(entry["task_types"]),
            ),
            str(entry["user_id"]),
        )
    )
    return report


async def generate_unsung_hero_report(
    team_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Fetch matching tasks and build the report."""
    rows = await get_task_repository().get_report_rows(
        team_id=team_id,
        date_from=date_from,
        date_to=date_to,
    )
    report = build_unsung_hero_report(rows)

    logger.info(f"Unsung hero report: {len(rows)} tasks, {len(report)} people (team={team_id})")
    return report

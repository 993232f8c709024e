"""
Personal contribution heatmap.

One bucket per UTC calendar day of a year. Completed tasks count on the day
they were last updated; recognitions count on the day they were sent.
Intensity (0-4) is relative to the user's busiest day of that year.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from ..database.repositories import get_task_repository, get_recognition_repository
from ..utils.datetime_utils import iter_year_days, to_aware_utc, year_bounds

logger = logging.getLogger(__name__)

CREDIT_WEIGHT = 0.7
TASK_WEIGHT = 0.3


def quantize_intensity(combined: float) -> int:
    """Map a 0..1 combined score onto the 0-4 scale."""
    if combined <= 0:
        return 0
    if combined <= 0.25:
        return 1
    if combined <= 0.5:
        return 2
    if combined <= 0.75:
        return 3
    return 4


def build_contribution_heatmap(
    year: int,
    task_events: Iterable[Tuple[datetime, int]],
    recognition_events: Iterable[Tuple[datetime, int]],
) -> List[Dict[str, Any]]:
    """
    Bucket contribution events into days of ``year``.

    Args:
        year: Calendar year
        task_events: (updated_at, credits) of completed tasks
        recognition_events: (created_at, credits) of received recognitions

    Returns:
        365/366 day entries in ascending date order
    """
    days: Dict[str, Dict[str, Any]] = {}
    for day in iter_year_days(year):
        key = day.isoformat()
        days[key] = {
            "date": key,
            "tasks_completed": 0,
            "credits_earned": 0,
            "intensity": 0,
        }

    for timestamp, credits in task_events:
        bucket = days.get(to_aware_utc(timestamp).date().isoformat())
        if bucket is None:
            continue
        bucket["tasks_completed"] += 1
        bucket["credits_earned"] += credits or 0

    for timestamp, credits in recognition_events:
        bucket = days.get(to_aware_utc(timestamp).date().isoformat())
        if bucket is None:
            continue
        bucket["credits_earned"] += credits or 0

    heatmap = list(days.values())
    max_credits = max(day["credits_earned"] for day in heatmap)
    max_tasks = max(day["tasks_completed"] for day in heatmap)

    for day in heatmap:
        credit_score = day["credits_earned"] / max_credits if max_credits > 0 else 0
        task_score = day["tasks_completed"] / max_tasks if max_tasks > 0 else 0
        day["intensity"] = quantize_intensity(
            credit_score * CREDIT_WEIGHT + task_score * TASK_WEIGHT
        )

    return heatmap


async def generate_contribution_heatmap(user_id: str, year: int) -> List[Dict[str, Any]]:
    """Fetch a user's completions and recognitions for ``year`` and bucket them."""
    start, end = year_bounds(year)

    task_events = await get_task_repository().get_completed_between(user_id, start, end)
    recognition_events = await get_recognition_repository().get_received_between(user_id, start, end)

    logger.debug(
        f"Heatmap {user_id}/{year}: {len(task_events)} completions, "
        f"{len(recognition_events)} recognitions"
    )
    return build_contribution_heatmap(year, task_events, recognition_events)

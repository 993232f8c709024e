"""
Tests for the unsung hero report (analytics/unsung_hero.py).
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytz

from honourus.analytics.unsung_hero import (
    build_unsung_hero_report,
    generate_unsung_hero_report,
    unsung_hero_score,
)


def _task(task_id, assignee_id, status="todo", credits=10, tags=None, updated_at=None, name=None):
    return {
        "id": task_id,
        "title": f"Task {task_id}",
        "status": status,
        "assignee_id": assignee_id,
        "assignee_name": name,
        "credits": credits,
        "tags": tags or [],
        "updated_at": updated_at or datetime(2024, 1, 1, tzinfo=pytz.UTC),
    }


class TestPerUserStats:

    def test_folds_tasks_per_assignee(self, sample_task_rows):
        report = build_unsung_hero_report(sample_task_rows)
        alice = next(r for r in report if r["user_id"] == "user_a")

        assert alice["user_name"] == "Alice"
        assert alice["total_tasks"] == 2
        assert alice["completed_tasks"] == 2
        assert alice["completion_rate"] == 100
        assert alice["total_credits"] == 60
        assert alice["avg_task_credits"] == 30

    def test_tag_stats(self, sample_task_rows):
        report = build_unsung_hero_report(sample_task_rows)
        alice = next(r for r in report if r["user_id"] == "user_a")

        assert alice["task_types"][0] == {"tag": "frontend", "count": 2, "completion_rate": 100}
        assert alice["task_types"][1] == {"tag": "auth", "count": 1, "completion_rate": 100}

    def test_tag_completion_rate_partial(self):
        tasks = [
            _task("1", "u", status="completed", tags=["api"]),
            _task("2", "u", status="todo", tags=["api"]),
        ]
        entry = build_unsung_hero_report(tasks)[0]
        assert entry["task_types"] == [{"tag": "api", "count": 2, "completion_rate": 50}]

    def test_only_top_five_tags(self):
        tags = ["a", "b", "c", "d", "e", "f", "g"]
        tasks = [_task(str(i), "u", tags=tags[: i + 1]) for i in range(7)]

        entry = build_unsung_hero_report(tasks)[0]

        assert len(entry["task_types"]) == 5
        assert [t["tag"] for t in entry["task_types"]] == ["a", "b", "c", "d", "e"]

    def test_recent_achievements_newest_first_capped(self):
        base = datetime(2024, 5, 1, tzinfo=pytz.UTC)
        tasks = [
            _task(str(i), "u", status="completed", credits=i, updated_at=base + timedelta(days=i))
            for i in range(7)
        ]

        entry = build_unsung_hero_report(tasks)[0]
        achievements = entry["recent_achievements"]

        assert len(achievements) == 5
        assert [a["credits"] for a in achievements] == [6, 5, 4, 3, 2]
        assert achievements[0]["task_title"] == "Task 6"
        assert achievements[0]["completed_at"] == (base + timedelta(days=6)).isoformat()

    def test_incomplete_tasks_are_not_achievements(self, sample_task_rows):
        report = build_unsung_hero_report(sample_task_rows)
        bob = next(r for r in report if r["user_id"] == "user_b")

        assert bob["completed_tasks"] == 0
        assert bob["completion_rate"] == 0
        assert bob["recent_achievements"] == []

    def test_missing_name_and_credits(self):
        entry = build_unsung_hero_report([_task("1", "u", credits=None)])[0]

        assert entry["user_name"] == "Unknown User"
        assert entry["total_credits"] == 0
        assert entry["avg_task_credits"] == 0

    def test_unassigned_tasks_are_skipped(self):
        report = build_unsung_hero_report([_task("1", None), _task("2", "u")])
        assert [r["user_id"] for r in report] == ["u"]

    def test_empty_input(self):
        assert build_unsung_hero_report([]) == []


class TestRanking:

    def test_score_formula(self):
        assert unsung_hero_score(100, 2, 2) == pytest.approx(40 + 0.6 + 0.6)

    def test_sorted_by_score_descending(self, sample_task_rows):
        report = build_unsung_hero_report(sample_task_rows)
        assert [r["user_id"] for r in report] == ["user_a", "user_b"]

    def test_ties_broken_by_user_id(self):
        tasks = [_task("1", "zed"), _task("2", "amy"), _task("3", "mia")]

        report = build_unsung_hero_report(tasks)

        assert [r["user_id"] for r in report] == ["amy", "mia", "zed"]

    def test_volume_raises_score(self):
        # 10 open tasks score 3.0, a single open task 0.3
        tasks = [_task(str(i), "busy") for i in range(10)] + [_task("x", "idle")]
        report = build_unsung_hero_report(tasks)
        assert report[0]["user_id"] == "busy"


class TestGenerateReport:

    @pytest.mark.asyncio
    async def test_passes_filters_to_repository(self, sample_task_rows):
        repo = AsyncMock()
        repo.get_report_rows = AsyncMock(return_value=sample_task_rows)
        date_from = datetime(2024, 1, 1, tzinfo=pytz.UTC)

        with patch("honourus.analytics.unsung_hero.get_task_repository", return_value=repo):
            report = await generate_unsung_hero_report(team_id="team_1", date_from=date_from)

        repo.get_report_rows.assert_awaited_once_with(team_id="team_1", date_from=date_from, date_to=None)
        assert len(report) == 2

"""
Tests for the personal analytics summary (analytics/summary.py).
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from honourus.analytics.summary import build_user_summary, get_user_analytics


class TestBuildUserSummary:

    def test_counts_and_scores(self):
        summary = build_user_summary(
            ["completed", "completed", "todo", "in-review"],
            credits=120,
            recognitions_received=3,
        )

        assert summary == {
            "tasksCompleted": 2,
            "creditsEarned": 120,
            "recognitionsReceived": 3,
            "teamPerformance": 50,
            # (2 * 0.6 + 3 * 0.4) * 10 = 24
            "productivityScore": 24,
        }

    def test_no_tasks(self):
        summary = build_user_summary([], credits=0, recognitions_received=0)

        assert summary["teamPerformance"] == 0
        assert summary["productivityScore"] == 0

    def test_rounds_half_up(self):
        # 1/8 = 12.5% -> 13
        summary = build_user_summary(["completed"] + ["todo"] * 7, credits=0, recognitions_received=0)
        assert summary["teamPerformance"] == 13

    def test_none_credits(self):
        summary = build_user_summary([], credits=None, recognitions_received=0)
        assert summary["creditsEarned"] == 0


class TestGetUserAnalytics:

    @pytest.mark.asyncio
    async def test_reads_repositories(self):
        task_repo = AsyncMock()
        task_repo.get_for_user = AsyncMock(return_value=[Mock(status="completed"), Mock(status="todo")])
        user_repo = AsyncMock()
        user_repo.get_by_id = AsyncMock(return_value=Mock(credits=75))
        recognition_repo = AsyncMock()
        recognition_repo.count_received = AsyncMock(return_value=1)

        with patch("honourus.analytics.summary.get_task_repository", return_value=task_repo), \
             patch("honourus.analytics.summary.get_user_repository", return_value=user_repo), \
             patch("honourus.analytics.summary.get_recognition_repository", return_value=recognition_repo):
            summary = await get_user_analytics("user_a")

        assert summary["tasksCompleted"] == 1
        assert summary["creditsEarned"] == 75
        assert summary["recognitionsReceived"] == 1
        assert summary["teamPerformance"] == 50

    @pytest.mark.asyncio
    async def test_missing_profile_has_zero_credits(self):
        task_repo = AsyncMock()
        task_repo.get_for_user = AsyncMock(return_value=[])
        user_repo = AsyncMock()
        user_repo.get_by_id = AsyncMock(return_value=None)
        recognition_repo = AsyncMock()
        recognition_repo.count_received = AsyncMock(return_value=0)

        with patch("honourus.analytics.summary.get_task_repository", return_value=task_repo), \
             patch("honourus.analytics.summary.get_user_repository", return_value=user_repo), \
             patch("honourus.analytics.summary.get_recognition_repository", return_value=recognition_repo):
            summary = await get_user_analytics("ghost")

        assert summary["creditsEarned"] == 0

"""
Pytest configuration and shared fixtures.
"""

import os

# Settings are read at import time; pin a test environment first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("JIRA_CLIENT_ID", "jira-client")
os.environ.setdefault("JIRA_CLIENT_SECRET", "jira-secret")
os.environ.setdefault("CLICKUP_CLIENT_ID", "clickup-client")
os.environ.setdefault("CLICKUP_CLIENT_SECRET", "clickup-secret")

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytz

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


@pytest.fixture
def mock_database():
    """Mock database with session context manager."""
    db = Mock()
    session = AsyncMock()

    # Mock session context manager
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)

    # Mock session methods
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.add = Mock()

    db.session = Mock(return_value=session)

    return db, session


@pytest.fixture
def sample_task_rows():
    """Task rows as returned by TaskRepository.get_report_rows."""
    def ts(day, hour=12):
        return datetime(2024, 3, day, hour, tzinfo=pytz.UTC)

    return [
        {
            "id": "task_1", "title": "Ship login", "status": "completed", "priority": "high",
            "assignee_id": "user_a", "assignee_name": "Alice", "credits": 40,
            "tags": ["frontend", "auth"], "created_at": ts(1), "updated_at": ts(3),
        },
        {
            "id": "task_2", "title": "Fix crash", "status": "completed", "priority": "medium",
            "assignee_id": "user_a", "assignee_name": "Alice", "credits": 20,
            "tags": ["frontend"], "created_at": ts(2), "updated_at": ts(5),
        },
        {
            "id": "task_3", "title": "Write docs", "status": "todo", "priority": "low",
            "assignee_id": "user_b", "assignee_name": "Bob", "credits": 10,
            "tags": ["docs"], "created_at": ts(2), "updated_at": ts(2),
        },
    ]

"""
Credit awarding against a real (in-memory SQLite) database.

Exercises the counter increment and ledger rows together, through the
same repositories the API uses.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from honourus.database.connection import Database
from honourus.database.models import Base
from honourus.database.repositories.recognitions import RecognitionRepository
from honourus.database.repositories.tasks import TaskRepository
from honourus.database.repositories.users import UserRepository


@pytest_asyncio.fixture
async def database():
    """Initialized Database backed by in-memory SQLite."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db = Database()
    db.engine = engine
    db.session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    db._initialized = True

    yield db

    await engine.dispose()


@pytest_asyncio.fixture
async def repos(database):
    users, tasks, recognitions = UserRepository(), TaskRepository(), RecognitionRepository()
    for repo in (users, tasks, recognitions):
        repo.db = database

    await users.create("user_a", "Alice", "alice@example.com", role="manager")
    await users.create("user_b", "Bob", "bob@example.com")
    return users, tasks, recognitions


@pytest.mark.asyncio
async def test_completion_with_proof_credits_assignee_once(repos):
    users, tasks, _ = repos
    task = await tasks.create(
        {"title": "Ship login", "assignee_id": "user_b", "credits": 25, "requires_proof": True},
        created_by="user_a",
    )

    _, awarded = await tasks.update(task.id, {"proof_uploaded": True}, acting_user_id="user_b")
    assert awarded is False

    completed, awarded = await tasks.update(task.id, {"status": "completed"}, acting_user_id="user_a")
    assert awarded is True
    assert completed.completed_at is not None
    assert (await users.get_by_id("user_b")).credits == 25

    # Re-sending completed must not pay out again
    _, awarded = await tasks.update(task.id, {"status": "completed"}, acting_user_id="user_a")
    assert awarded is False
    assert (await users.get_by_id("user_b")).credits == 25

    activity = await users.get_activity("user_b")
    assert len(activity) == 1
    assert activity[0].activity_type == "task_completed"
    assert activity[0].credits_earned == 25
    assert activity[0].details["task_id"] == task.id


@pytest.mark.asyncio
async def test_completion_without_proof_awards_nothing(repos):
    users, tasks, _ = repos
    task = await tasks.create(
        {"title": "Refactor", "assignee_id": "user_b", "credits": 40, "requires_proof": True},
        created_by="user_a",
    )

    _, awarded = await tasks.update(task.id, {"status": "completed"}, acting_user_id="user_a")

    assert awarded is False
    assert (await users.get_by_id("user_b")).credits == 0
    assert await users.get_activity("user_b") == []


@pytest.mark.asyncio
async def test_recognition_credits_recipient(repos):
    users, _, recognitions = repos

    recognition = await recognitions.create(
        from_user_id="user_a",
        to_user_id="user_b",
        message="Great pairing session",
        credits=30,
        recognition_type="collaboration",
    )

    assert (await users.get_by_id("user_b")).credits == 30
    assert (await users.get_by_id("user_a")).credits == 0
    assert await recognitions.count_received("user_b") == 1

    activity = await users.get_activity("user_b")
    assert [entry.activity_type for entry in activity] == ["recognition_received"]
    assert activity[0].details["recognition_id"] == recognition.id


@pytest.mark.asyncio
async def test_credits_accumulate_across_sources(repos):
    users, tasks, recognitions = repos
    task = await tasks.create(
        {"title": "Fix crash", "assignee_id": "user_b", "credits": 25, "requires_proof": True},
        created_by="user_a",
    )
    await tasks.update(task.id, {"proof_uploaded": True}, acting_user_id="user_b")
    await tasks.update(task.id, {"status": "completed"}, acting_user_id="user_a")
    await recognitions.create("user_a", "user_b", "Thanks", 30, "achievement")

    assert (await users.get_by_id("user_b")).credits == 55
    assert len(await users.get_activity("user_b")) == 2

"""
Unit tests for UserRepository and the credit ledger helper.
"""

import pytest
from unittest.mock import AsyncMock, Mock
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from honourus.database.repositories.users import UserRepository, add_credits
from honourus.database.models import UserDB, ActivityLogDB
from honourus.database.exceptions import DatabaseConstraintError, DatabaseOperationError


@pytest.fixture
def user_repository(mock_database):
    """Create UserRepository with mocked database."""
    db, session = mock_database
    repo = UserRepository()
    repo.db = db
    return repo, session


@pytest.fixture
def sample_user():
    return UserDB(
        id="user_a",
        name="Alice",
        email="alice@example.com",
        role="member",
        department="Eng",
        credits=10,
        created_at=datetime(2024, 3, 1),
        updated_at=datetime(2024, 3, 1),
    )


# ============================================================
# ADD CREDITS
# ============================================================

@pytest.mark.asyncio
async def test_add_credits_increments_and_logs():
    session = AsyncMock()
    session.add = Mock()
    session.execute.return_value = Mock(rowcount=1)

    awarded = await add_credits(session, "user_a", 25, "task_completed", {"task_id": "task_1"})

    assert awarded is True
    session.execute.assert_awaited_once()
    entry = session.add.call_args.args[0]
    assert isinstance(entry, ActivityLogDB)
    assert entry.user_id == "user_a"
    assert entry.activity_type == "task_completed"
    assert entry.credits_earned == 25
    assert entry.details == {"task_id": "task_1"}


@pytest.mark.asyncio
async def test_add_credits_unknown_user_writes_no_ledger_row():
    session = AsyncMock()
    session.add = Mock()
    session.execute.return_value = Mock(rowcount=0)

    awarded = await add_credits(session, "ghost", 25, "task_completed")

    assert awarded is False
    session.add.assert_not_called()


# ============================================================
# CREATE
# ============================================================

@pytest.mark.asyncio
async def test_create_starts_with_zero_credits(user_repository):
    repo, session = user_repository

    user = await repo.create("uid-1", "Alice", "alice@example.com", department="Eng")

    session.add.assert_called_once()
    session.flush.assert_awaited_once()
    assert user.id == "uid-1"
    assert user.credits == 0
    assert user.role == "member"


@pytest.mark.asyncio
async def test_create_duplicate_raises_constraint_error(user_repository):
    repo, session = user_repository
    session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate email"))

    with pytest.raises(DatabaseConstraintError):
        await repo.create("uid-1", "Alice", "alice@example.com")


@pytest.mark.asyncio
async def test_create_other_failure(user_repository):
    repo, session = user_repository
    session.flush.side_effect = RuntimeError("connection lost")

    with pytest.raises(DatabaseOperationError):
        await repo.create("uid-1", "Alice", "alice@example.com")


# ============================================================
# READ / UPDATE
# ============================================================

@pytest.mark.asyncio
async def test_get_by_id(user_repository, sample_user):
    repo, session = user_repository
    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=sample_user)
    session.execute.return_value = mock_result

    assert await repo.get_by_id("user_a") == sample_user


@pytest.mark.asyncio
async def test_update_applies_fields(user_repository, sample_user):
    repo, session = user_repository
    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=sample_user)
    session.execute.return_value = mock_result

    user = await repo.update("user_a", {"name": "Alicia", "department": "Design"})

    assert user.name == "Alicia"
    assert user.department == "Design"
    assert user.credits == 10
    session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_missing_user(user_repository):
    repo, session = user_repository
    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    session.execute.return_value = mock_result

    assert await repo.update("ghost", {"name": "x"}) is None
    session.flush.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_activity(user_repository):
    repo, session = user_repository
    entries = [ActivityLogDB(id=2, user_id="user_a", activity_type="recognition_received", credits_earned=5)]
    mock_result = Mock()
    mock_result.scalars.return_value.all.return_value = entries
    session.execute.return_value = mock_result

    assert await repo.get_activity("user_a", limit=10) == entries

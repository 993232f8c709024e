"""
Unit tests for RecognitionRepository.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch
from datetime import datetime

import pytz

from honourus.database.repositories.recognitions import RecognitionRepository
from honourus.database.exceptions import DatabaseOperationError


@pytest.fixture
def recognition_repository(mock_database):
    """Create RecognitionRepository with mocked database."""
    db, session = mock_database
    repo = RecognitionRepository()
    repo.db = db
    return repo, session


@pytest.mark.asyncio
async def test_create_credits_recipient(recognition_repository):
    repo, session = recognition_repository

    with patch("honourus.database.repositories.recognitions.add_credits", AsyncMock(return_value=True)) as mock_add:
        recognition = await repo.create(
            from_user_id="user_a",
            to_user_id="user_b",
            message="Great pairing session",
            credits=30,
            recognition_type="collaboration",
        )

    assert recognition.id.startswith("recognition_")
    session.add.assert_called_once_with(recognition)
    kwargs = mock_add.call_args.kwargs
    assert kwargs["user_id"] == "user_b"
    assert kwargs["amount"] == 30
    assert kwargs["activity_type"] == "recognition_received"
    assert kwargs["details"]["recognition_id"] == recognition.id
    assert kwargs["details"]["from_user_id"] == "user_a"


@pytest.mark.asyncio
async def test_create_failure(recognition_repository):
    repo, session = recognition_repository

    with patch(
        "honourus.database.repositories.recognitions.add_credits",
        AsyncMock(side_effect=RuntimeError("lock timeout")),
    ):
        with pytest.raises(DatabaseOperationError):
            await repo.create("user_a", "user_b", "Thanks", 5, "achievement")


@pytest.mark.asyncio
async def test_count_received(recognition_repository):
    repo, session = recognition_repository
    session.execute.return_value = Mock(scalar=Mock(return_value=3))

    assert await repo.count_received("user_b") == 3


@pytest.mark.asyncio
async def test_count_received_none(recognition_repository):
    repo, session = recognition_repository
    session.execute.return_value = Mock(scalar=Mock(return_value=None))

    assert await repo.count_received("user_b") == 0


@pytest.mark.asyncio
async def test_get_received_between(recognition_repository):
    repo, session = recognition_repository
    ts = datetime(2024, 3, 1, 9, tzinfo=pytz.UTC)
    mock_result = Mock()
    mock_result.all.return_value = [(ts, 30)]
    session.execute.return_value = mock_result

    rows = await repo.get_received_between(
        "user_b", datetime(2024, 1, 1, tzinfo=pytz.UTC), datetime(2025, 1, 1, tzinfo=pytz.UTC)
    )

    assert rows == [(ts, 30)]

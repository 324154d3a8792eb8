"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

import datetime as dt
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Provides a fully mocked AsyncSession with common methods.

    Usage:
        def test_service(mock_db_session: AsyncMock):
            service = NoteService(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    return session


@pytest.fixture
def mock_db_result() -> MagicMock:
    """
    Mock database query result.

    Use this to mock the result of session.execute().

    Usage:
        def test_query(mock_db_session, mock_db_result):
            mock_db_result.scalar_one_or_none.return_value = Note(id=1)
            mock_db_session.execute.return_value = mock_db_result
    """
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=None)
    result.scalars = MagicMock()
    result.scalars.return_value.all = MagicMock(return_value=[])
    result.scalars.return_value.first = MagicMock(return_value=None)
    return result


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def note_payload():
    """
    Build a note as the API serializes it.

    Usage:
        def test_store(note_payload):
            note = note_payload(1, is_pinned=True)
    """

    def factory(note_id: int, **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": note_id,
            "content": f"<p>note {note_id}</p>",
            "date": dt.date(2024, 1, 1).isoformat(),
            "tags": [],
            "is_pinned": False,
            "is_archived": False,
            "author": None,
            "created_at": "2024-01-01T09:00:00.000Z",
            "updated_at": "2024-01-01T09:00:00.000Z",
            "deleted_at": None,
        }
        payload.update(overrides)
        return payload

    return factory


# =============================================================================
# HTTP Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """
    Mock HTTP client for testing API calls.

    Usage:
        async def test_store(mock_http_client):
            mock_http_client.get.return_value = httpx.Response(200, json={...})
    """
    client = AsyncMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.put = AsyncMock()
    client.delete = AsyncMock()
    return client


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger

"""
Integration Test Fixtures.

Fixtures for integration tests - uses real database and services.
These fixtures build on the root conftest.py database fixtures.
"""

import datetime as dt
from collections.abc import AsyncGenerator
from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.backend.core.database import get_db_session
from daybook.backend.core.dependencies import get_identities
from daybook.backend.models.note import Note


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(app_config: SimpleNamespace, db_session: AsyncSession) -> FastAPI:
    """
    Application wired to the test configuration and database session.

    Every request shares the test session, so rows added by a test are
    visible to the API and everything is rolled back afterwards.
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    with patch("daybook.backend.main.get_app_config", return_value=app_config):
        from daybook.backend.main import create_app

        application = create_app()

    application.dependency_overrides[get_db_session] = override_get_db_session
    application.dependency_overrides[get_identities] = lambda: list(app_config.application.identities)
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session override.

    Usage:
        async def test_list(client: AsyncClient):
            response = await client.get("/api/v1/notes")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def make_note(db_session: AsyncSession):
    """
    Insert a note directly through the ORM.

    Usage:
        note = await make_note(content="hi", date=dt.date(2024, 1, 1), is_pinned=True)
    """

    async def factory(**overrides: Any) -> Note:
        values: dict[str, Any] = {
            "content": "<p>note</p>",
            "date": dt.date(2024, 1, 1),
            "tags": [],
        }
        values.update(overrides)
        note = Note(**values)
        db_session.add(note)
        await db_session.flush()
        await db_session.refresh(note)
        return note

    return factory


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request validation error (400).

        Returns:
            Response JSON data
        """
        data = ApiAssertions.assert_error(response, 400, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()

"""
Unit Tests for Note Service.

Tests the NoteService business logic with mocked dependencies.
"""

import datetime as dt
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from daybook.backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from daybook.backend.repositories.note_query import NoteListQuery
from daybook.backend.schemas.note import NoteCreate, NoteUpdate
from daybook.backend.services.note import NoteService

DAY = dt.date(2024, 1, 1)


@pytest.fixture
def service():
    """NoteService with a mocked session and two known identities."""
    return NoteService(AsyncMock(), identities=["Alice", "Bob"])


def make_note(**attrs):
    note = MagicMock()
    note.id = attrs.pop("id", 1)
    note.is_deleted = attrs.pop("is_deleted", False)
    for key, value in attrs.items():
        setattr(note, key, value)
    return note


class TestCreateNote:
    """Tests for note creation."""

    @pytest.mark.asyncio
    async def test_create_note_success(self, service):
        note = make_note(id=7)

        with patch.object(service.repo, "create", return_value=note) as mock_create:
            data = NoteCreate(content="<p>run</p>", date=DAY, tags=["sport"], author="Alice")
            result = await service.create_note(data)

        assert result is note
        mock_create.assert_called_once_with(
            content="<p>run</p>",
            date=DAY,
            tags=["sport"],
            is_pinned=False,
            is_archived=False,
            author="Alice",
            deleted_at=None,
        )

    @pytest.mark.asyncio
    async def test_whitespace_content_rejected(self, service):
        with patch.object(service.repo, "create") as mock_create:
            with pytest.raises(ValidationError) as exc_info:
                await service.create_note(NoteCreate(content="   ", date=DAY))

        assert exc_info.value.details["missing_fields"] == ["content"]
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_author_rejected(self, service):
        with patch.object(service.repo, "create") as mock_create:
            with pytest.raises(ValidationError, match="Unknown author"):
                await service.create_note(NoteCreate(content="x", date=DAY, author="Mallory"))

        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_any_author_allowed_without_identities(self):
        service = NoteService(AsyncMock())

        with patch.object(service.repo, "create", return_value=make_note()) as mock_create:
            await service.create_note(NoteCreate(content="x", date=DAY, author="Mallory"))

        assert mock_create.call_args[1]["author"] == "Mallory"

    @pytest.mark.asyncio
    async def test_empty_author_stored_as_null(self, service):
        with patch.object(service.repo, "create", return_value=make_note()) as mock_create:
            await service.create_note(NoteCreate(content="x", date=DAY, author=""))

        assert mock_create.call_args[1]["author"] is None


class TestListNotes:

    @pytest.mark.asyncio
    async def test_passes_query_to_repository(self, service):
        query = NoteListQuery(search="run")

        with patch.object(service.repo, "list_notes", return_value=[]) as mock_list:
            result = await service.list_notes(query)

        assert result == []
        mock_list.assert_called_once_with(query)

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, service):
        query = NoteListQuery(start_date=dt.date(2024, 2, 1), end_date=dt.date(2024, 1, 1))

        with patch.object(service.repo, "list_notes") as mock_list:
            with pytest.raises(ValidationError, match="startDate must not be after endDate"):
                await service.list_notes(query)

        mock_list.assert_not_called()

    @pytest.mark.asyncio
    async def test_exact_date_overrides_inverted_range(self, service):
        query = NoteListQuery(
            date=DAY,
            start_date=dt.date(2024, 2, 1),
            end_date=dt.date(2024, 1, 1),
        )

        with patch.object(service.repo, "list_notes", return_value=[]) as mock_list:
            await service.list_notes(query)

        mock_list.assert_called_once()


class TestUpdateNote:

    @pytest.mark.asyncio
    async def test_only_supplied_fields_change(self, service):
        note = make_note()

        with patch.object(service.repo, "update", return_value=note) as mock_update:
            await service.update_note(1, NoteUpdate(is_pinned=True))

        args, kwargs = mock_update.call_args
        assert args == (1,)
        assert kwargs["is_pinned"] is True
        assert isinstance(kwargs["updated_at"], dt.datetime)
        assert set(kwargs) == {"is_pinned", "updated_at"}

    @pytest.mark.asyncio
    async def test_empty_update_returns_stored_note(self, service):
        note = make_note()

        with patch.object(service.repo, "get_by_id", return_value=note) as mock_get, \
             patch.object(service.repo, "update") as mock_update:
            result = await service.update_note(1, NoteUpdate(content=None))

        assert result is note
        mock_get.assert_called_once_with(1)
        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_whitespace_content_rejected(self, service):
        with patch.object(service.repo, "update") as mock_update:
            with pytest.raises(ValidationError) as exc_info:
                await service.update_note(1, NoteUpdate(content="   "))

        assert exc_info.value.details["missing_fields"] == ["content"]
        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_note_raises_not_found(self, service):
        with patch.object(service.repo, "update", side_effect=NotFoundError("Note not found")):
            with pytest.raises(NotFoundError):
                await service.update_note(99, NoteUpdate(content="x"))


class TestTrashLifecycle:

    @pytest.mark.asyncio
    async def test_soft_delete_uses_active_lookup(self, service):
        note = make_note()

        with patch.object(service.repo, "get_active", return_value=note) as mock_get, \
             patch.object(service.repo, "soft_delete", return_value=note) as mock_delete:
            await service.soft_delete_note(1)

        mock_get.assert_called_once_with(1)
        mock_delete.assert_called_once_with(note)

    @pytest.mark.asyncio
    async def test_soft_delete_of_trashed_note_is_not_found(self, service):
        with patch.object(service.repo, "get_active", side_effect=NotFoundError("Note not found")), \
             patch.object(service.repo, "soft_delete") as mock_delete:
            with pytest.raises(NotFoundError):
                await service.soft_delete_note(1)

        mock_delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_restore_uses_trashed_lookup(self, service):
        note = make_note(is_deleted=True)

        with patch.object(service.repo, "get_trashed", return_value=note), \
             patch.object(service.repo, "restore", return_value=note) as mock_restore:
            await service.restore_note(1)

        mock_restore.assert_called_once_with(note)

    @pytest.mark.asyncio
    async def test_purge_requires_trashed_note(self, service):
        with patch.object(service.repo, "get_by_id", return_value=make_note(is_deleted=False)), \
             patch.object(service.repo, "remove") as mock_remove:
            with pytest.raises(ConflictError):
                await service.purge_note(1)

        mock_remove.assert_not_called()

    @pytest.mark.asyncio
    async def test_purge_removes_trashed_note(self, service):
        note = make_note(is_deleted=True)

        with patch.object(service.repo, "get_by_id", return_value=note), \
             patch.object(service.repo, "remove", return_value=None) as mock_remove:
            await service.purge_note(1)

        mock_remove.assert_called_once_with(note)

    @pytest.mark.asyncio
    async def test_empty_trash_returns_count(self, service):
        with patch.object(service.repo, "empty_trash", return_value=3):
            assert await service.empty_trash() == 3


class TestAggregates:

    @pytest.mark.asyncio
    async def test_list_tags_forwards_archive_flag(self, service):
        with patch.object(service.repo, "distinct_tags", return_value=["a", "b"]) as mock_tags:
            result = await service.list_tags(include_archived=True)

        assert result == ["a", "b"]
        mock_tags.assert_called_once_with(include_archived=True)

    @pytest.mark.asyncio
    async def test_calendar_rejects_inverted_range(self, service):
        with pytest.raises(ValidationError):
            await service.calendar(dt.date(2024, 2, 1), dt.date(2024, 1, 1))

    @pytest.mark.asyncio
    async def test_calendar_returns_counts(self, service):
        counts = [(DAY, 2)]

        with patch.object(service.repo, "count_by_day", return_value=counts) as mock_count:
            assert await service.calendar(DAY, DAY) == counts

        mock_count.assert_called_once_with(DAY, DAY)

"""
Integration Tests for NoteStore against the real API.

The store talks to the ASGI app in-process, so every optimistic write is
checked against what the backend actually persisted.
"""

import datetime as dt

import pytest
from fastapi import FastAPI
from httpx import ASGITransport

from daybook.backend.core.exceptions import ConflictError
from daybook.backend.repositories.note_query import NoteListQuery
from daybook.cli.client import APIClient, APIError
from daybook.cli.store import NoteState, NoteStore

DAY = dt.date(2024, 1, 1)


@pytest.fixture
async def api_client(app: FastAPI):
    client = APIClient(base_url="http://test", timeout=5, transport=ASGITransport(app=app))
    yield client
    await client.close()


class TestNoteStoreRoundTrip:

    async def test_create_pin_and_list(self, api_client):
        store = NoteStore(api_client, NoteListQuery(date=DAY))
        await store.load()

        created = await store.create("<p>run</p>", DAY, tags=["sport"], author="Alice")
        await store.toggle_pin(created["id"])

        assert [n["id"] for n in store.notes] == [created["id"]]
        assert store.get(created["id"])["is_pinned"] is True
        assert store.get(created["id"])["tags"] == ["sport"]

    async def test_listing_respects_query(self, api_client, make_note):
        await make_note(content="<p>other day</p>", date=dt.date(2024, 1, 2))
        kept = await make_note(content="<p>today</p>")
        store = NoteStore(api_client, NoteListQuery(date=DAY))

        notes = await store.load()

        assert [n["id"] for n in notes] == [kept.id]

    async def test_trash_lifecycle(self, api_client, make_note):
        note = await make_note()
        store = NoteStore(api_client)
        await store.load()

        await store.soft_delete(note.id)
        assert store.notes == []
        assert await store.state_of(note.id) is NoteState.TRASHED

        await store.restore(note.id)
        assert [n["id"] for n in store.notes] == [note.id]

        await store.soft_delete(note.id)
        await store.purge(note.id)
        assert await store.state_of(note.id) is NoteState.GONE
        with pytest.raises(APIError) as exc_info:
            await store.fetch(note.id)
        assert exc_info.value.status_code == 404

    async def test_empty_trash(self, api_client, make_note):
        await make_note(deleted_at=dt.datetime(2024, 1, 2))
        await make_note(deleted_at=dt.datetime(2024, 1, 2))
        store = NoteStore(api_client, NoteListQuery(show_deleted=True))
        await store.load()

        assert await store.empty_trash() == 2
        assert store.notes == []

    async def test_unknown_author_rolls_back(self, api_client):
        store = NoteStore(api_client)
        await store.load()

        with pytest.raises(APIError) as exc_info:
            await store.create("<p>hi</p>", DAY, author="Mallory")

        assert exc_info.value.status_code == 400
        assert store.notes == []

    async def test_archive_of_trashed_note_is_rejected(self, api_client, make_note):
        note = await make_note(deleted_at=dt.datetime(2024, 1, 2))
        store = NoteStore(api_client)
        await store.load()

        with pytest.raises(ConflictError):
            await store.toggle_archive(note.id)

"""
Optimistic Note Store.

Client-side cache of one note listing. Every mutation rewrites the cache
first so the UI reflects it immediately, then calls the API, then
refetches the listing whether the call worked or not. A failed call is
rolled back by that refetch.

Per-note states as seen by the client:

    active  <--toggle_archive-->  archived
    active/archived --soft_delete--> trashed
    trashed --restore--> active
    trashed --purge----> gone   (terminal)

Usage:
    store = NoteStore.from_config(get_api_client(), NoteListQuery(date=today))
    await store.load()
    await store.toggle_pin(note_id)
"""

import asyncio
import datetime as dt
import itertools
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx

from daybook.backend.core.exceptions import ConflictError
from daybook.backend.core.logging import get_logger, log_with_source
from daybook.backend.core.utils import format_timestamp, utc_now
from daybook.backend.repositories.note_query import NoteListQuery
from daybook.cli.client import APIClient, APIError, unwrap

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class NoteState(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASHED = "trashed"
    GONE = "gone"


ALLOWED_TRANSITIONS: frozenset[tuple[NoteState, NoteState]] = frozenset({
    (NoteState.ACTIVE, NoteState.ARCHIVED),
    (NoteState.ARCHIVED, NoteState.ACTIVE),
    (NoteState.ACTIVE, NoteState.TRASHED),
    (NoteState.ARCHIVED, NoteState.TRASHED),
    (NoteState.TRASHED, NoteState.ACTIVE),
    (NoteState.TRASHED, NoteState.GONE),
})


def note_state(note: dict[str, Any]) -> NoteState:
    """State of a serialized note."""
    if note.get("deleted_at"):
        return NoteState.TRASHED
    if note.get("is_archived"):
        return NoteState.ARCHIVED
    return NoteState.ACTIVE


def check_transition(note_id: int, current: NoteState, target: NoteState) -> None:
    """
    Raises:
        ConflictError: If ``current -> target`` is not a legal move
    """
    if (current, target) not in ALLOWED_TRANSITIONS:
        raise ConflictError(
            f"Note {note_id} cannot go from {current.value} to {target.value}"
        )


class NoteStore:
    """
    Cached, optimistically updated note listing.

    Mutations are serialized through one lock; a refetch from ``poll``
    waits for an in-flight mutation to finish before touching the cache.
    """

    def __init__(
        self,
        client: APIClient,
        query: NoteListQuery | None = None,
        api_prefix: str = "/api/v1",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        revalidate_on_focus: bool = True,
        revalidate_on_reconnect: bool = True,
        on_change: Callable[[list[dict[str, Any]]], None] | None = None,
    ) -> None:
        self.client = client
        self.query = query or NoteListQuery()
        self.api_prefix = api_prefix.rstrip("/")
        self.poll_interval = poll_interval
        self.revalidate_on_focus = revalidate_on_focus
        self.revalidate_on_reconnect = revalidate_on_reconnect
        self.on_change = on_change

        self.notes: list[dict[str, Any]] = []
        self.loaded = False
        self.online = True
        self._gone: set[int] = set()
        self._lock = asyncio.Lock()
        self._temp_ids = itertools.count(-1, -1)

    @classmethod
    def from_config(
        cls,
        client: APIClient,
        query: NoteListQuery | None = None,
        **kwargs: Any,
    ) -> "NoteStore":
        """Build a store with polling and revalidation settings from config/settings."""
        from daybook.backend.core.config import get_app_config

        app_config = get_app_config()
        return cls(
            client,
            query,
            api_prefix=app_config.application.api_prefix,
            poll_interval=app_config.application.client.poll_interval_seconds,
            revalidate_on_focus=app_config.features.client_revalidate_on_focus,
            revalidate_on_reconnect=app_config.features.client_revalidate_on_reconnect,
            **kwargs,
        )

    @property
    def notes_path(self) -> str:
        return f"{self.api_prefix}/notes"

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def load(self) -> list[dict[str, Any]]:
        """
        First fetch of the listing.

        Raises:
            APIError, httpx.HTTPError: If the listing cannot be loaded
        """
        return await self.revalidate()

    async def revalidate(self) -> list[dict[str, Any]]:
        """Refetch the listing and replace the cache with it."""
        async with self._lock:
            return await self._reload()

    async def _reload(self) -> list[dict[str, Any]]:
        response = await self.client.get(self.notes_path, params=self.query.to_params())
        notes = unwrap(response) or []
        self._set_notes(notes)
        self.loaded = True
        return self.notes

    async def fetch(self, note_id: int) -> dict[str, Any]:
        """Fetch one note from the server, trashed or not."""
        response = await self.client.get(f"{self.notes_path}/{note_id}")
        return unwrap(response)

    def get(self, note_id: int) -> dict[str, Any] | None:
        """Cached note by id."""
        for note in self.notes:
            if note.get("id") == note_id:
                return note
        return None

    async def state_of(self, note_id: int) -> NoteState:
        """Current state, from the cache when possible."""
        if note_id in self._gone:
            return NoteState.GONE
        note = self.get(note_id)
        if note is None:
            note = await self.fetch(note_id)
        return note_state(note)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(
        self,
        content: str,
        date: dt.date,
        tags: list[str] | None = None,
        is_pinned: bool = False,
        author: str | None = None,
    ) -> dict[str, Any]:
        """Create a note; it shows up in the cache before the server answers."""
        now = format_timestamp(utc_now())
        payload = {
            "content": content,
            "date": date.isoformat(),
            "tags": list(tags or []),
            "is_pinned": is_pinned,
            "author": author,
        }
        placeholder = {
            **payload,
            "id": next(self._temp_ids),
            "is_archived": False,
            "deleted_at": None,
            "created_at": now,
            "updated_at": now,
        }

        def apply() -> None:
            self._set_notes([*self.notes, placeholder])

        return await self._mutate(
            "create",
            apply,
            lambda: self.client.post(self.notes_path, json=payload),
        )

    async def update(self, note_id: int, **changes: Any) -> dict[str, Any]:
        """Partially update a note; only the given fields are sent."""
        if note_id in self._gone:
            raise ConflictError(f"Note {note_id} has been deleted permanently")

        body = {
            key: value.isoformat() if isinstance(value, dt.date) else value
            for key, value in changes.items()
            if value is not None
        }
        return await self._mutate(
            "update",
            lambda: self._patch_cached(note_id, body),
            lambda: self.client.put(f"{self.notes_path}/{note_id}", json=body),
        )

    async def toggle_pin(self, note_id: int) -> dict[str, Any]:
        """Flip the pin flag."""
        current = await self._cached_or_fetched(note_id)
        return await self.update(note_id, is_pinned=not current.get("is_pinned", False))

    async def toggle_archive(self, note_id: int) -> dict[str, Any]:
        """Move a note between active and archived."""
        current = await self.state_of(note_id)
        target = NoteState.ACTIVE if current is NoteState.ARCHIVED else NoteState.ARCHIVED
        check_transition(note_id, current, target)
        return await self.update(note_id, is_archived=target is NoteState.ARCHIVED)

    async def soft_delete(self, note_id: int) -> dict[str, Any]:
        """Move a note to the trash."""
        check_transition(note_id, await self.state_of(note_id), NoteState.TRASHED)
        return await self._mutate(
            "soft_delete",
            lambda: self._patch_cached(note_id, {"deleted_at": format_timestamp(utc_now())}),
            lambda: self.client.delete(f"{self.notes_path}/{note_id}"),
        )

    async def restore(self, note_id: int) -> dict[str, Any]:
        """Take a note out of the trash."""
        check_transition(note_id, await self.state_of(note_id), NoteState.ACTIVE)
        return await self._mutate(
            "restore",
            lambda: self._patch_cached(note_id, {"deleted_at": None}),
            lambda: self.client.post(f"{self.notes_path}/{note_id}/restore"),
        )

    async def purge(self, note_id: int) -> None:
        """Delete a trashed note for good."""
        check_transition(note_id, await self.state_of(note_id), NoteState.GONE)

        def apply() -> None:
            self._set_notes([note for note in self.notes if note.get("id") != note_id])

        await self._mutate(
            "purge",
            apply,
            lambda: self.client.delete(
                f"{self.notes_path}/{note_id}",
                params={"permanent": "true"},
            ),
        )
        self._gone.add(note_id)

    async def empty_trash(self) -> int:
        """Permanently delete every trashed note."""
        trashed = {note["id"] for note in self.notes if note_state(note) is NoteState.TRASHED}

        def apply() -> None:
            self._set_notes([note for note in self.notes if note.get("id") not in trashed])

        result = await self._mutate(
            "empty_trash",
            apply,
            lambda: self.client.delete(f"{self.notes_path}/trash"),
        )
        self._gone.update(trashed)
        return int((result or {}).get("deleted", 0))

    async def _mutate(
        self,
        action: str,
        apply: Callable[[], None],
        send: Callable[[], Awaitable[httpx.Response]],
    ) -> Any:
        async with self._lock:
            apply()
            try:
                result = unwrap(await send())
            except (APIError, httpx.HTTPError) as e:
                log_with_source(
                    logger,
                    "cli",
                    "error",
                    "Note mutation failed",
                    action=action,
                    error=str(e),
                )
                await self._revalidate_after(action, "Rollback refetch failed")
                raise

            await self._revalidate_after(action, "Refetch after mutation failed")
            return result

    async def _revalidate_after(self, action: str, message: str) -> None:
        """Refetch the listing; a failed refetch is logged, not raised."""
        try:
            await self._reload()
        except (APIError, httpx.HTTPError) as e:
            log_with_source(
                logger,
                "cli",
                "warning",
                message,
                action=action,
                error=str(e),
            )

    # -------------------------------------------------------------------------
    # Revalidation triggers
    # -------------------------------------------------------------------------

    async def poll(self, interval: float | None = None, stop: asyncio.Event | None = None) -> None:
        """
        Revalidate every ``interval`` seconds until ``stop`` is set.

        Fetch errors are logged and the loop keeps going; the store is
        marked offline until the next successful fetch.
        """
        interval = interval if interval is not None else self.poll_interval
        stop = stop or asyncio.Event()

        while not stop.is_set():
            try:
                await self.revalidate()
            except (APIError, httpx.HTTPError) as e:
                if self.online:
                    log_with_source(logger, "cli", "warning", "Lost connection to backend", error=str(e))
                self.online = False
            else:
                if not self.online:
                    log_with_source(logger, "cli", "info", "Connection to backend restored")
                self.online = True

            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except TimeoutError:
                pass

    async def on_focus(self) -> bool:
        """Revalidate when the user comes back to the view, if enabled."""
        if not self.revalidate_on_focus:
            return False
        await self.revalidate()
        return True

    async def on_reconnect(self) -> bool:
        """Revalidate after the network comes back, if enabled."""
        if not self.revalidate_on_reconnect:
            return False
        await self.revalidate()
        self.online = True
        return True

    # -------------------------------------------------------------------------
    # Cache helpers
    # -------------------------------------------------------------------------

    async def _cached_or_fetched(self, note_id: int) -> dict[str, Any]:
        if note_id in self._gone:
            raise ConflictError(f"Note {note_id} has been deleted permanently")
        return self.get(note_id) or await self.fetch(note_id)

    def _patch_cached(self, note_id: int, fields: dict[str, Any]) -> None:
        self._set_notes([
            {**note, **fields} if note.get("id") == note_id else note
            for note in self.notes
        ])

    def _visible(self, note: dict[str, Any]) -> bool:
        """Whether a cached note still belongs in this listing."""
        if self.query.show_deleted:
            return bool(note.get("deleted_at"))
        if note.get("deleted_at"):
            return False
        return self.query.show_archived or not note.get("is_archived")

    def _set_notes(self, notes: list[dict[str, Any]]) -> None:
        self.notes = [note for note in notes if self._visible(note)]
        if self.on_change is not None:
            self.on_change(self.notes)

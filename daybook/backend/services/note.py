"""
Note Service.

Business logic layer for notes. Orchestrates the repository, validates
input and enforces the trash lifecycle:

    active/archived --soft delete--> trashed --restore--> active
                                     trashed --purge----> gone
"""

import datetime as dt

from sqlalchemy.ext.asyncio import AsyncSession

from daybook.backend.core.exceptions import ConflictError, ValidationError
from daybook.backend.core.utils import utc_now
from daybook.backend.models.note import Note
from daybook.backend.repositories.note import NoteRepository
from daybook.backend.repositories.note_query import NoteListQuery
from daybook.backend.schemas.note import NoteCreate, NoteUpdate
from daybook.backend.services.base import BaseService


class NoteService(BaseService):
    """
    Service for note business logic.

    ``identities`` is the configured list of display names; when it is
    non-empty, a supplied author must be one of them.
    """

    def __init__(self, session: AsyncSession, identities: list[str] | None = None) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.identities = list(identities or [])

    def _check_author(self, author: str | None) -> None:
        if author and self.identities and author not in self.identities:
            raise ValidationError(
                "Unknown author",
                details={"author": author, "allowed": self.identities},
            )

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Create a new note.

        New notes always start outside the trash and unarchived.

        Raises:
            ValidationError: If content is blank or the author is not a known identity
        """
        self._validate_required(data.model_dump(), ["content", "date"])
        self._check_author(data.author)

        self._log_operation("Creating note", date=data.date.isoformat(), author=data.author)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                content=data.content,
                date=data.date,
                tags=data.tags,
                is_pinned=data.is_pinned,
                is_archived=False,
                author=data.author or None,
                deleted_at=None,
            ),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def get_note(self, note_id: int) -> Note:
        """
        Get a note by ID, trashed or not.

        Raises:
            NotFoundError: If note not found
        """
        return await self.repo.get_by_id(note_id)

    async def list_notes(self, query: NoteListQuery) -> list[Note]:
        """
        List notes matching the listing filters.

        Raises:
            ValidationError: If the date range is inverted
        """
        if (
            query.date is None
            and query.start_date is not None
            and query.end_date is not None
            and query.start_date > query.end_date
        ):
            raise ValidationError(
                "startDate must not be after endDate",
                details={
                    "startDate": query.start_date.isoformat(),
                    "endDate": query.end_date.isoformat(),
                },
            )

        self._log_debug(
            "Listing notes",
            sort_by=query.sort_mode.value,
            trash=query.show_deleted,
            archived=query.show_archived,
        )
        return await self._execute_db_operation("list_notes", self.repo.list_notes(query))

    async def update_note(self, note_id: int, data: NoteUpdate) -> Note:
        """
        Partially update a note.

        Only fields supplied with a non-null value change; everything else
        keeps its stored value. ``updated_at`` is refreshed on every write.

        Raises:
            NotFoundError: If note not found
            ValidationError: If content is given but blank
        """
        changes = data.changes()

        if not changes:
            return await self.repo.get_by_id(note_id)

        if "content" in changes:
            self._validate_required(changes, ["content"])

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=sorted(changes),
        )

        changes["updated_at"] = utc_now()
        return await self._execute_db_operation(
            "update_note",
            self.repo.update(note_id, **changes),
        )

    async def soft_delete_note(self, note_id: int) -> Note:
        """
        Move a note to the trash.

        Raises:
            NotFoundError: If no note outside the trash has this ID
        """
        note = await self.repo.get_active(note_id)
        self._log_operation("Trashing note", note_id=note_id)
        return await self._execute_db_operation("soft_delete_note", self.repo.soft_delete(note))

    async def restore_note(self, note_id: int) -> Note:
        """
        Take a note out of the trash.

        Raises:
            NotFoundError: If no trashed note has this ID
        """
        note = await self.repo.get_trashed(note_id)
        self._log_operation("Restoring note", note_id=note_id)
        return await self._execute_db_operation("restore_note", self.repo.restore(note))

    async def purge_note(self, note_id: int) -> None:
        """
        Permanently delete a trashed note.

        Raises:
            NotFoundError: If note not found
            ConflictError: If the note is not in the trash
        """
        note = await self.repo.get_by_id(note_id)
        if not note.is_deleted:
            raise ConflictError("Note must be moved to the trash before it can be deleted permanently")

        self._log_operation("Purging note", note_id=note_id)
        await self._execute_db_operation("purge_note", self.repo.remove(note))

    async def empty_trash(self) -> int:
        """Permanently delete every trashed note. Returns the number removed."""
        deleted = await self._execute_db_operation("empty_trash", self.repo.empty_trash())
        self._log_operation("Emptied trash", deleted=deleted)
        return deleted

    async def list_tags(self, include_archived: bool = False) -> list[str]:
        """Distinct tags in use outside the trash."""
        return await self.repo.distinct_tags(include_archived=include_archived)

    async def calendar(
        self,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> list[tuple[dt.date, int]]:
        """Per-day note counts for calendar markers."""
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        return await self.repo.count_by_day(start_date, end_date)

"""
Note Repository.

Data access layer for notes. Handles all database operations
for the Note model.
"""

import datetime as dt

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.backend.core.exceptions import NotFoundError
from daybook.backend.core.utils import utc_now
from daybook.backend.models.note import Note
from daybook.backend.repositories.base import BaseRepository
from daybook.backend.repositories.note_query import NoteListQuery, build_note_list_statement


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds listing, trash and aggregate queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def list_notes(self, query: NoteListQuery) -> list[Note]:
        """Full matching row set for a listing, already ordered."""
        result = await self.session.execute(
            build_note_list_statement(query, self.dialect_name)
        )
        return list(result.scalars().all())

    async def get_active(self, id: int) -> Note:
        """
        Get a note that is not in the trash.

        Raises:
            NotFoundError: If no active note has this ID
        """
        result = await self.session.execute(
            select(Note).where(Note.id == id, Note.deleted_at.is_(None))
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError("Note not found")
        return note

    async def get_trashed(self, id: int) -> Note:
        """
        Get a note that is in the trash.

        Raises:
            NotFoundError: If no trashed note has this ID
        """
        result = await self.session.execute(
            select(Note).where(Note.id == id, Note.deleted_at.is_not(None))
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError("Note not found in trash")
        return note

    async def soft_delete(self, note: Note) -> Note:
        """Move a note to the trash."""
        return await self.apply(note, deleted_at=utc_now())

    async def restore(self, note: Note) -> Note:
        """Take a note out of the trash."""
        return await self.apply(note, deleted_at=None)

    async def empty_trash(self) -> int:
        """
        Permanently delete every trashed note.

        Returns:
            Number of rows removed
        """
        result = await self.session.execute(
            delete(Note).where(Note.deleted_at.is_not(None))
        )
        await self.session.flush()
        return result.rowcount or 0

    async def distinct_tags(self, include_archived: bool = False) -> list[str]:
        """Sorted distinct tags across notes outside the trash."""
        stmt = select(Note.tags).where(Note.deleted_at.is_(None))
        if not include_archived:
            stmt = stmt.where(Note.is_archived == False)  # noqa: E712

        result = await self.session.execute(stmt)
        tags = {tag for row_tags in result.scalars().all() for tag in (row_tags or [])}
        return sorted(tags, key=str.casefold)

    async def count_by_day(
        self,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> list[tuple[dt.date, int]]:
        """
        Number of visible (not trashed, not archived) notes per day.

        Returns:
            (date, count) pairs in ascending date order, days without notes omitted
        """
        stmt = (
            select(Note.date, func.count(Note.id))
            .where(Note.deleted_at.is_(None))
            .where(Note.is_archived == False)  # noqa: E712
            .group_by(Note.date)
            .order_by(Note.date.asc())
        )
        if start_date is not None:
            stmt = stmt.where(Note.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Note.date <= end_date)

        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

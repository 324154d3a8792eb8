"""
Note Listing Query.

Builds the single SELECT behind every note listing: calendar day,
timeline range, search, tag, archive and trash views all go through
``build_note_list_statement``.

Filter dimensions are independent and combined with AND:

    trash       deleted_at IS NOT NULL  (show_deleted)  |  deleted_at IS NULL
    archive     is_archived = false     unless show_archived or show_deleted
    date        date = :date            wins over the range below
    range       date >= :start_date / date <= :end_date (either or both)
    search      content ILIKE '%:search%'  (wildcards in :search are literal)
    tag         :tag is an element of tags

Ordering: pinned first unless ignore_pinned, then the sort key, then id DESC.
"""

import datetime as dt
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Select, String, literal_column, select, text, type_coerce
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql.elements import ColumnElement

from daybook.backend.models.note import Note


class SortBy(str, Enum):
    """Sort modes accepted by the listing endpoint."""

    DATE = "date"
    UPDATED = "updated"
    ALPHA = "alpha"


@dataclass(frozen=True)
class NoteListQuery:
    """Filter and sort parameters for a note listing."""

    search: str | None = None
    tag: str | None = None
    show_archived: bool = False
    show_deleted: bool = False
    sort_by: SortBy | str = SortBy.DATE
    date: dt.date | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    ignore_pinned: bool = False

    @property
    def sort_mode(self) -> SortBy:
        """Resolved sort mode; unknown values fall back to date order."""
        try:
            return SortBy(self.sort_by)
        except ValueError:
            return SortBy.DATE

    def to_params(self) -> dict[str, str]:
        """Render as the listing endpoint's query-string parameters."""
        params: dict[str, str] = {"sortBy": self.sort_mode.value}
        if self.search:
            params["search"] = self.search
        if self.tag:
            params["tag"] = self.tag
        if self.show_archived:
            params["showArchived"] = "true"
        if self.show_deleted:
            params["showDeleted"] = "true"
        if self.date is not None:
            params["date"] = self.date.isoformat()
        else:
            if self.start_date is not None:
                params["startDate"] = self.start_date.isoformat()
            if self.end_date is not None:
                params["endDate"] = self.end_date.isoformat()
        if self.ignore_pinned:
            params["ignorePinned"] = "true"
        return params


def tag_condition(tag: str, dialect_name: str) -> ColumnElement[bool]:
    """
    Membership test for one tag.

    PostgreSQL stores tags as text[] and uses ``@>``. Other dialects store
    a JSON list; SQLite expands it with ``json_each``.
    """
    if dialect_name == "postgresql":
        return type_coerce(Note.tags, ARRAY(String)).contains([tag])
    members = (
        select(literal_column("1"))
        .select_from(text("json_each(notes.tags)"))
        .where(literal_column("json_each.value") == tag)
    )
    return members.exists()


def build_filters(query: NoteListQuery, dialect_name: str) -> list[ColumnElement[bool]]:
    """WHERE conditions for a listing, in a stable order."""
    conditions: list[ColumnElement[bool]] = []

    if query.show_deleted:
        conditions.append(Note.deleted_at.is_not(None))
    else:
        conditions.append(Note.deleted_at.is_(None))
        if not query.show_archived:
            conditions.append(Note.is_archived == False)  # noqa: E712

    if query.date is not None:
        conditions.append(Note.date == query.date)
    else:
        if query.start_date is not None:
            conditions.append(Note.date >= query.start_date)
        if query.end_date is not None:
            conditions.append(Note.date <= query.end_date)

    if query.search:
        conditions.append(Note.content.icontains(query.search, autoescape=True))

    tag = (query.tag or "").strip()
    if tag:
        conditions.append(tag_condition(tag, dialect_name))

    return conditions


def build_ordering(query: NoteListQuery) -> list[ColumnElement]:
    """ORDER BY terms for a listing."""
    ordering: list[ColumnElement] = []
    if not query.ignore_pinned:
        ordering.append(Note.is_pinned.desc())

    mode = query.sort_mode
    if mode is SortBy.UPDATED:
        ordering.append(Note.updated_at.desc())
    elif mode is SortBy.ALPHA:
        ordering.append(Note.content.asc())
    else:
        ordering.extend([Note.date.desc(), Note.created_at.desc()])

    ordering.append(Note.id.desc())
    return ordering


def build_note_list_statement(query: NoteListQuery, dialect_name: str) -> Select[tuple[Note]]:
    """Compose the full listing SELECT."""
    return (
        select(Note)
        .where(*build_filters(query, dialect_name))
        .order_by(*build_ordering(query))
    )

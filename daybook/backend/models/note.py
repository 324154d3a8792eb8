"""
Note Model.

Database model for journal notes.
"""

import datetime as dt

from sqlalchemy import JSON, Date, DateTime, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from daybook.backend.models.base import Base, IntegerIdMixin, TimestampMixin

# Native text[] on PostgreSQL, JSON list everywhere else (SQLite in tests).
TagList = JSON().with_variant(ARRAY(String(64)), "postgresql")


class Note(IntegerIdMixin, TimestampMixin, Base):
    """
    Note database model.

    A dated journal entry. ``date`` is the calendar day the user filed the
    note under and is independent of ``created_at``. A non-null
    ``deleted_at`` means the note sits in the trash.
    """

    __tablename__ = "notes"

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    is_pinned: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )
    is_archived: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )
    tags: Mapped[list[str]] = mapped_column(
        TagList,
        default=list,
        nullable=False,
    )
    author: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    deleted_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime,
        nullable=True,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, date={self.date}, deleted={self.is_deleted})>"

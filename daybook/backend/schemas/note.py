"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

import datetime as dt
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from daybook.backend.core.utils import format_timestamp

MAX_TAG_LENGTH = 64


def _clean_tags(value: Any) -> Any:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    if not isinstance(value, list):
        return value
    seen: list[str] = []
    for tag in value:
        if not isinstance(tag, str):
            return value
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _check_tag_length(value: list[str]) -> list[str]:
    for tag in value:
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag longer than {MAX_TAG_LENGTH} characters")
    return value


TagInput = Annotated[list[str], BeforeValidator(_clean_tags), AfterValidator(_check_tag_length)]


class NoteCreate(BaseModel):
    """Schema for creating a new note."""

    content: str = Field(
        ...,
        min_length=1,
        description="Note content (rich-text HTML)",
        examples=["<p>Went for a run.</p>"],
    )
    date: dt.date = Field(
        ...,
        description="Calendar day the note belongs to",
        examples=["2024-01-01"],
    )
    tags: TagInput = Field(
        default_factory=list,
        description="Tags, display order preserved",
    )
    is_pinned: bool = Field(
        default=False,
        description="Pin to the top of the default sort",
    )
    author: str | None = Field(
        default=None,
        max_length=100,
        description="Display name of the writing identity",
    )


class NoteUpdate(BaseModel):
    """
    Schema for updating an existing note.

    Partial merge: fields left out (or sent as null) keep their stored value.
    """

    content: str | None = Field(
        default=None,
        min_length=1,
        description="Note content",
    )
    date: dt.date | None = Field(
        default=None,
        description="Move the note to another day",
    )
    tags: TagInput | None = Field(
        default=None,
        description="Replacement tag list",
    )
    is_pinned: bool | None = Field(
        default=None,
        description="Pin status",
    )
    is_archived: bool | None = Field(
        default=None,
        description="Archive status",
    )

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually supplied with a non-null value."""
        return self.model_dump(exclude_none=True)


class NoteResponse(BaseModel):
    """
    Schema for a note in API responses.

    Field presence is normalized: tags default to [], flags to false,
    an empty author to null, and timestamps share one string format.
    """

    id: int = Field(description="Note identifier")
    content: str = Field(description="Note content")
    date: dt.date = Field(description="Calendar day (YYYY-MM-DD)")
    created_at: dt.datetime = Field(description="Creation timestamp")
    updated_at: dt.datetime = Field(description="Last update timestamp")
    is_pinned: bool = Field(default=False, description="Whether the note is pinned")
    is_archived: bool = Field(default=False, description="Whether the note is archived")
    tags: list[str] = Field(default_factory=list, description="Tags")
    author: str | None = Field(default=None, description="Author display name")
    deleted_at: dt.datetime | None = Field(
        default=None,
        description="When the note was moved to the trash",
    )

    model_config = ConfigDict(from_attributes=True)

    @field_validator("is_pinned", "is_archived", mode="before")
    @classmethod
    def _default_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> Any:
        return list(value) if isinstance(value, (list, tuple)) else []

    @field_validator("author", mode="before")
    @classmethod
    def _blank_author(cls, value: Any) -> Any:
        return value or None

    @field_serializer("created_at", "updated_at", "deleted_at")
    def _serialize_timestamp(self, value: dt.datetime | None) -> str | None:
        return format_timestamp(value)


class DayCount(BaseModel):
    """Number of visible notes filed under one calendar day."""

    date: dt.date
    count: int


class TrashEmptied(BaseModel):
    """Result of emptying the trash."""

    deleted: int

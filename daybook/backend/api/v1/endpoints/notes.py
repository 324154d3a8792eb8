"""
Notes API Endpoints.

REST API endpoints for notes, the trash and note aggregates.
"""

import datetime as dt

from fastapi import APIRouter, Query, Response

from daybook.backend.core.dependencies import DbSession, Identities, RequestId
from daybook.backend.repositories.note_query import NoteListQuery, SortBy
from daybook.backend.schemas.base import ApiResponse
from daybook.backend.schemas.note import (
    DayCount,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    TrashEmptied,
)
from daybook.backend.services.note import NoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List notes",
    description="List notes for a day, a date range, a search, a tag, the archive or the trash.",
)
async def list_notes(
    db: DbSession,
    request_id: RequestId,
    date: dt.date | None = Query(default=None, description="Exact calendar day"),
    search: str | None = Query(default=None, description="Case-insensitive content substring"),
    tag: str | None = Query(default=None, description="Only notes carrying this tag"),
    show_archived: bool = Query(default=False, alias="showArchived"),
    show_deleted: bool = Query(default=False, alias="showDeleted", description="List the trash"),
    sort_by: SortBy = Query(default=SortBy.DATE, alias="sortBy"),
    start_date: dt.date | None = Query(default=None, alias="startDate"),
    end_date: dt.date | None = Query(default=None, alias="endDate"),
    ignore_pinned: bool = Query(default=False, alias="ignorePinned"),
) -> ApiResponse[list[NoteResponse]]:
    """List notes matching the given filters."""
    query = NoteListQuery(
        search=search,
        tag=tag,
        show_archived=show_archived,
        show_deleted=show_deleted,
        sort_by=sort_by,
        date=date,
        start_date=start_date,
        end_date=end_date,
        ignore_pinned=ignore_pinned,
    )
    service = NoteService(db)
    notes = await service.list_notes(query)
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    identities: Identities,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    service = NoteService(db, identities=identities)
    note = await service.create_note(data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "/tags",
    response_model=ApiResponse[list[str]],
    summary="List tags",
    description="Sorted distinct tags of notes outside the trash.",
)
async def list_tags(
    db: DbSession,
    request_id: RequestId,
    show_archived: bool = Query(default=False, alias="showArchived"),
) -> ApiResponse[list[str]]:
    service = NoteService(db)
    return ApiResponse(data=await service.list_tags(include_archived=show_archived))


@router.get(
    "/calendar",
    response_model=ApiResponse[list[DayCount]],
    summary="Notes per day",
    description="Number of visible notes per calendar day, for day markers.",
)
async def calendar(
    db: DbSession,
    request_id: RequestId,
    start_date: dt.date | None = Query(default=None, alias="startDate"),
    end_date: dt.date | None = Query(default=None, alias="endDate"),
) -> ApiResponse[list[DayCount]]:
    service = NoteService(db)
    days = await service.calendar(start_date, end_date)
    return ApiResponse(data=[DayCount(date=day, count=count) for day, count in days])


@router.delete(
    "/trash",
    response_model=ApiResponse[TrashEmptied],
    summary="Empty the trash",
)
async def empty_trash(
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[TrashEmptied]:
    """Permanently delete every trashed note."""
    service = NoteService(db)
    deleted = await service.empty_trash()
    return ApiResponse(data=TrashEmptied(deleted=deleted))


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
)
async def get_note(
    note_id: int,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    service = NoteService(db)
    note = await service.get_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Partial merge: only provided, non-null fields are changed.",
)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    service = NoteService(db)
    note = await service.update_note(note_id, data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.delete(
    "/{note_id}",
    response_model=None,
    summary="Delete a note",
    description="Move a note to the trash, or with permanent=true remove a trashed note for good.",
    responses={204: {"description": "Note permanently deleted"}},
)
async def delete_note(
    note_id: int,
    db: DbSession,
    request_id: RequestId,
    permanent: bool = Query(default=False),
) -> ApiResponse[NoteResponse] | Response:
    """Soft or permanent delete."""
    service = NoteService(db)
    if permanent:
        await service.purge_note(note_id)
        return Response(status_code=204)

    note = await service.soft_delete_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.post(
    "/{note_id}/restore",
    response_model=ApiResponse[NoteResponse],
    summary="Restore a note",
    description="Take a note out of the trash.",
)
async def restore_note(
    note_id: int,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Restore a trashed note."""
    service = NoteService(db)
    note = await service.restore_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))

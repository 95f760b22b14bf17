from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from notemaker.core.modules.note.models import MAX_CONTENT_LENGTH, MAX_TAG_LENGTH, MAX_TAGS, MAX_TITLE_LENGTH, Note
from notemaker.core.modules.note.query import parse_tags
from notemaker.core.pagination import Pagination
from notemaker.web.deps import AccessTokenDep, AppDep
from notemaker.web.openapi import ApiResponse, ErrorResponse

router: APIRouter = APIRouter(tags=["notes"])

Tag = Annotated[str, Field(max_length=MAX_TAG_LENGTH)]


class NoteRequest(BaseModel):
    """Note contents for create and update."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    tags: list[Tag] = Field(default_factory=list, max_length=MAX_TAGS)

    model_config = {
        "json_schema_extra": {
            "examples": [{"title": "Groceries", "content": "Milk, eggs, coffee", "tags": ["home", "shopping"]}]
        }
    }


class NotesPage(BaseModel):
    notes: list[Note]
    pagination: Pagination


class NoteData(BaseModel):
    note: Note


_AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Invalid or expired access token"},
}


@router.get(
    "/notes",
    summary="List notes",
    description="Get the current user's notes, newest first, optionally searched by text and filtered by tags.",
    operation_id="listNotes",
    response_model_exclude_none=True,
    responses={200: {"description": "Page of notes"}, **_AUTH_RESPONSES},
)
async def list_notes(
    app: AppDep,
    access_token: AccessTokenDep,
    page: Annotated[int, Query(ge=1, description="Page number, starting at 1")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum notes per page")] = 10,
    search: Annotated[str | None, Query(description="Case-insensitive text in title or content")] = None,
    tags: Annotated[str | None, Query(description="Comma-separated tags, any of which must match")] = None,
) -> ApiResponse[NotesPage]:
    result = await app.get_notes(access_token, page, limit, search, parse_tags(tags))
    return ApiResponse(data=NotesPage(notes=result.items, pagination=result.pagination))


@router.get(
    "/notes/{note_id}",
    summary="Get note",
    operation_id="getNote",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Note details"},
        404: {"model": ErrorResponse, "description": "Note not found"},
        **_AUTH_RESPONSES,
    },
)
async def get_note(note_id: UUID, app: AppDep, access_token: AccessTokenDep) -> ApiResponse[NoteData]:
    return ApiResponse(data=NoteData(note=await app.get_note(access_token, note_id)))


@router.post(
    "/notes",
    summary="Create note",
    operation_id="createNote",
    status_code=201,
    response_model_exclude_none=True,
    responses={
        201: {"description": "Note created"},
        400: {"model": ErrorResponse, "description": "Invalid note"},
        **_AUTH_RESPONSES,
    },
)
async def create_note(request: NoteRequest, app: AppDep, access_token: AccessTokenDep) -> ApiResponse[NoteData]:
    note = await app.create_note(access_token, request.title, request.content, request.tags)
    return ApiResponse(message="Note created successfully", data=NoteData(note=note))


@router.put(
    "/notes/{note_id}",
    summary="Update note",
    operation_id="updateNote",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Note updated"},
        400: {"model": ErrorResponse, "description": "Invalid note"},
        404: {"model": ErrorResponse, "description": "Note not found"},
        **_AUTH_RESPONSES,
    },
)
async def update_note(
    note_id: UUID, request: NoteRequest, app: AppDep, access_token: AccessTokenDep
) -> ApiResponse[NoteData]:
    note = await app.update_note(access_token, note_id, request.title, request.content, request.tags)
    return ApiResponse(message="Note updated successfully", data=NoteData(note=note))


@router.delete(
    "/notes/{note_id}",
    summary="Delete note",
    operation_id="deleteNote",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Note deleted"},
        404: {"model": ErrorResponse, "description": "Note not found"},
        **_AUTH_RESPONSES,
    },
)
async def delete_note(note_id: UUID, app: AppDep, access_token: AccessTokenDep) -> ApiResponse[None]:
    await app.delete_note(access_token, note_id)
    return ApiResponse(message="Note deleted successfully")

from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from notemaker.core.core import Service
from notemaker.core.modules.note.models import Note
from notemaker.core.modules.note.query import build_notes_query, clean_tags
from notemaker.core.pagination import Pagination, PaginationResult
from notemaker.errors import NoteNotFoundError
from notemaker.utils import now

logger = structlog.get_logger(__name__)


class NoteService(Service):
    """Manages notes, always scoped to their owner."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("notes")

    async def on_start(self) -> None:
        """Create indexes for owner listing and tag filtering."""
        await self._collection.create_index([("user_id", 1), ("created_at", -1)])
        await self._collection.create_index([("tags", 1)])

    async def list_notes(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        tags: list[str] | None = None,
    ) -> PaginationResult[Note]:
        """Get a page of the user's notes, newest first."""
        query = build_notes_query(user_id, search, tags)
        total = await self._collection.count_documents(query)
        pagination = Pagination(page=page, limit=limit, total=total)

        cursor = self._collection.find(query).sort("created_at", -1).skip(pagination.skip).limit(limit)
        items = [Note.model_validate(doc) for doc in await cursor.to_list()]

        logger.debug("list_notes", user_id=str(user_id), total=total, page=page, returned=len(items))
        return PaginationResult(items=items, pagination=pagination)

    async def get_note(self, user_id: UUID, note_id: UUID) -> Note:
        """Get note by ID if it belongs to the user."""
        note = Note.from_mongo(await self._collection.find_one({"_id": note_id, "user_id": user_id}))
        if note is None:
            raise NoteNotFoundError
        return note

    async def create_note(self, user_id: UUID, title: str, content: str, tags: list[str]) -> Note:
        timestamp = now()
        note = Note(
            user_id=user_id,
            title=title.strip(),
            content=content,
            tags=clean_tags(tags),
            created_at=timestamp,
            updated_at=timestamp,
        )
        await self._collection.insert_one(note.to_mongo())
        return note

    async def update_note(self, user_id: UUID, note_id: UUID, title: str, content: str, tags: list[str]) -> Note:
        """Replace title, content, and tags of an owned note."""
        document = await self._collection.find_one_and_update(
            {"_id": note_id, "user_id": user_id},
            {"$set": {"title": title.strip(), "content": content, "tags": clean_tags(tags), "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        note = Note.from_mongo(document)
        if note is None:
            raise NoteNotFoundError
        return note

    async def delete_note(self, user_id: UUID, note_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": note_id, "user_id": user_id})
        if result.deleted_count == 0:
            raise NoteNotFoundError

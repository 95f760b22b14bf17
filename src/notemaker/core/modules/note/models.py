from datetime import datetime
from uuid import UUID

from pydantic import Field

from notemaker.core.db import MongoModel
from notemaker.utils import now

MAX_TITLE_LENGTH = 255
MAX_CONTENT_LENGTH = 10000
MAX_TAGS = 10
MAX_TAG_LENGTH = 50


class Note(MongoModel):
    """Short text note owned by a single user.

    Indexed on (user_id, created_at desc) and tags.
    """

    user_id: UUID
    title: str
    content: str
    tags: list[str] = []
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

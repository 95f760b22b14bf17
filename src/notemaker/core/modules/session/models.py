"""Refresh session models."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from notemaker.core.db import MongoModel
from notemaker.utils import now


class RefreshSession(MongoModel):
    """Durable counterpart of an issued refresh token.

    Indexed on token - unique, user_id, expires_at (TTL).
    Rotation rewrites ``token`` and ``expires_at`` in place, so one row
    tracks a whole refresh lineage.
    """

    user_id: UUID
    token: str
    expires_at: datetime
    is_revoked: bool = False
    created_at: datetime = Field(default_factory=now)

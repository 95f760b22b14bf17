from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from notemaker.core.core import Service
from notemaker.core.modules.session.models import RefreshSession

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Service for managing refresh sessions."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("refresh_sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # Unique index for token (for refresh lookups)
        await self._collection.create_index([("token", 1)], unique=True)
        # Single index for user_id (for revoking all sessions of a user)
        await self._collection.create_index([("user_id", 1)])
        # TTL index for automatic cleanup once expired
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def create(self, user_id: UUID, token: str, at: datetime) -> RefreshSession:
        session = RefreshSession(
            user_id=user_id,
            token=token,
            expires_at=at + self.core.tokens.refresh_ttl,
            created_at=at,
        )
        await self._collection.insert_one(session.to_mongo())
        return session

    async def find_active_by_token(self, token: str, at: datetime) -> RefreshSession | None:
        """Find an unrevoked, unexpired session by exact token value."""
        document = await self._collection.find_one({"token": token, "is_revoked": False, "expires_at": {"$gt": at}})
        return RefreshSession.from_mongo(document)

    async def rotate(self, session_id: UUID, old_token: str, new_token: str, at: datetime) -> bool:
        """Advance a session to ``new_token`` and push its expiry out.

        Conditioned on the session still holding ``old_token`` and not being
        revoked; returns False when a concurrent refresh or revocation won.
        """
        result = await self._collection.update_one(
            {"_id": session_id, "token": old_token, "is_revoked": False},
            {"$set": {"token": new_token, "expires_at": at + self.core.tokens.refresh_ttl}},
        )
        return result.modified_count == 1

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every session of a user and return how many were revoked."""
        result = await self._collection.update_many(
            {"user_id": user_id, "is_revoked": False}, {"$set": {"is_revoked": True}}
        )
        logger.info("sessions_revoked", user_id=str(user_id), count=result.modified_count)
        return result.modified_count

    async def delete(self, token: str) -> None:
        """Delete a session by token; deleting a missing session is not an error."""
        await self._collection.delete_one({"token": token})

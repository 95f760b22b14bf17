import secrets
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from notemaker.core.core import Service
from notemaker.core.modules.otp.models import OTP_LENGTH, OneTimeCode, OtpPurpose
from notemaker.utils import normalize_email

logger = structlog.get_logger(__name__)


def generate_code() -> str:
    """Random 6-digit numeric code without a leading zero."""
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


class OtpService(Service):
    """Ledger of short-lived, single-use, purpose-tagged codes."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("otps")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("email", 1), ("code", 1)])
        # TTL index removes codes once expires_at has passed
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.core.config.otp_ttl_minutes)

    async def create(self, email: str, purpose: OtpPurpose, at: datetime) -> OneTimeCode:
        """Issue a new code; earlier outstanding codes stay valid until they expire."""
        otp = OneTimeCode(
            email=normalize_email(email),
            code=generate_code(),
            purpose=purpose,
            expires_at=at + self.ttl,
            created_at=at,
        )
        await self._collection.insert_one(otp.to_mongo())
        logger.info("otp_created", purpose=purpose.value, expires_at=otp.expires_at.isoformat())
        return otp

    async def find_latest_matching(
        self, email: str, code: str, purpose: OtpPurpose, at: datetime, *, valid_only: bool = True
    ) -> OneTimeCode | None:
        """Most recently created code matching (email, code, purpose).

        With ``valid_only`` the code must also be unused and unexpired at ``at``.
        """
        query: dict[str, Any] = {"email": normalize_email(email), "code": code, "purpose": purpose.value}
        if valid_only:
            query["is_used"] = False
            query["expires_at"] = {"$gt": at}
        document = await self._collection.find_one(query, sort=[("created_at", -1)])
        return OneTimeCode.from_mongo(document)

    async def mark_used(self, otp_id: UUID) -> bool:
        """Claim a code. Returns False if another request already claimed it."""
        result = await self._collection.update_one({"_id": otp_id, "is_used": False}, {"$set": {"is_used": True}})
        return result.modified_count == 1

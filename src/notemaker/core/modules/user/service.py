import asyncio
from datetime import datetime
from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from notemaker.core.core import Service
from notemaker.core.modules.user.models import User
from notemaker.core.modules.user.validators import validate_password
from notemaker.errors import DuplicateEmailError, UserNotFoundError
from notemaker.utils import normalize_email, now

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Credential store: user identity records keyed by unique lowercased email.

    Passwords enter through two explicit paths, ``create_with_password`` /
    ``set_password`` (plaintext, hashed here) and ``create_with_hash``
    (already hashed or an unusable placeholder). Values are never sniffed
    for hash format on write.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("created_at", -1)])
        logger.debug("user_service_started")

    async def find_by_email(self, email: str) -> User | None:
        return User.from_mongo(await self._collection.find_one({"email": normalize_email(email)}))

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID."""
        user = User.from_mongo(await self._collection.find_one({"_id": user_id}))
        if user is None:
            raise UserNotFoundError
        return user

    async def hash_password(self, password: str) -> str:
        """Hash a plaintext password with the configured bcrypt cost."""
        salt = bcrypt.gensalt(rounds=self.core.config.bcrypt_rounds)
        hashed = await asyncio.to_thread(bcrypt.hashpw, password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    async def verify_password(self, user: User, password: str) -> bool:
        """Verify password against stored hash.

        Placeholders stored for OAuth-only accounts are not bcrypt hashes,
        so the comparison fails structurally and returns False.
        """
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw, password.encode("utf-8"), user.password_hash.encode("utf-8")
            )
        except ValueError:
            return False

    async def create_with_password(
        self, email: str, password: str, first_name: str, last_name: str, *, verified: bool = False
    ) -> User:
        """Create user from a plaintext password."""
        validate_password(password)
        password_hash = await self.hash_password(password)
        return await self.create_with_hash(email, password_hash, first_name, last_name, verified=verified)

    async def create_with_hash(
        self, email: str, password_hash: str, first_name: str, last_name: str, *, verified: bool = False
    ) -> User:
        """Create user from an already computed hash (or unusable placeholder)."""
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            is_email_verified=verified,
        )
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            raise DuplicateEmailError from e
        logger.info("user_created", user_id=str(user.id), verified=verified)
        return user

    async def set_password(self, user_id: UUID, password: str, at: datetime | None = None) -> None:
        """Replace the stored hash with a fresh hash of ``password``."""
        validate_password(password, field="newPassword")
        password_hash = await self.hash_password(password)
        result = await self._collection.update_one(
            {"_id": user_id}, {"$set": {"password_hash": password_hash, "updated_at": at or now()}}
        )
        if result.matched_count == 0:
            raise UserNotFoundError

    async def touch_last_login(self, user_id: UUID, at: datetime) -> None:
        await self._collection.update_one({"_id": user_id}, {"$set": {"last_login_at": at, "updated_at": at}})

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from notemaker.core.db import MongoModel
from notemaker.utils import now


class User(MongoModel):
    """User domain model with credentials.

    Indexed on email - unique.
    """

    email: str  # lowercased
    password_hash: str  # bcrypt hash, or an unusable placeholder for OAuth-only accounts
    first_name: str
    last_name: str
    is_email_verified: bool = False
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    first_name: str = Field(..., alias="firstName", description="Given name")
    last_name: str = Field(..., alias="lastName", description="Family name")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email, first_name=user.first_name, last_name=user.last_name)

"""One-time passcode models."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from notemaker.core.db import MongoModel
from notemaker.utils import now

OTP_LENGTH = 6


class OtpPurpose(StrEnum):
    SIGNUP = "signup"
    LOGIN = "login"  # reserved, no flow issues it
    PASSWORD_RESET = "password_reset"


class OneTimeCode(MongoModel):
    """Purpose-scoped code proving control of an email address.

    Indexed on (email, code) and expires_at (TTL, removed once expired).
    Usable only while unused and ``now < expires_at``.
    """

    email: str
    code: str
    purpose: OtpPurpose
    expires_at: datetime
    is_used: bool = False
    created_at: datetime = Field(default_factory=now)

    def is_expired(self, at: datetime) -> bool:
        return at >= self.expires_at

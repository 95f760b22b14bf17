"""Pending registrations carried by the client between signup steps.

The server keeps nothing between "request signup" and "verify OTP". The
client receives the hashed password and names together with a signed seal
and must echo the bundle back; the seal makes the bundle tamper-evident and
ties it to the email it was issued for.
"""

import math
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import BaseModel, ConfigDict, Field

from notemaker.errors import InvalidPendingError

ALGORITHM = "HS256"
AUDIENCE = "pending-registration"


class PendingRegistration(BaseModel):
    """Not-yet-created account: hashed password and profile fields."""

    hashed_password: str = Field(..., alias="hashedPassword")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    seal: str = Field("", description="Signed token binding the fields above to the signup email")

    model_config = ConfigDict(populate_by_name=True)


def seal_registration(
    email: str, hashed_password: str, first_name: str, last_name: str, secret: str, at: datetime, ttl: timedelta
) -> PendingRegistration:
    payload = {
        "sub": email,
        "aud": AUDIENCE,
        "pwd": hashed_password,
        "fn": first_name,
        "ln": last_name,
        "iat": int(at.timestamp()),
        # Rounded up so the seal never lapses before the code issued with it
        "exp": math.ceil((at + ttl).timestamp()),
    }
    return PendingRegistration(
        hashed_password=hashed_password,
        first_name=first_name,
        last_name=last_name,
        seal=jwt.encode(payload, secret, algorithm=ALGORITHM),
    )


def open_registration(
    email: str, pending: PendingRegistration | None, secret: str
) -> tuple[PendingRegistration, datetime]:
    """Check the seal against ``email`` and the visible fields.

    Expiry is not enforced here; the caller compares the returned instant
    with its own clock reading.

    Returns:
        The checked bundle and the instant its seal expires

    Raises:
        InvalidPendingError: bundle or seal missing, forged, issued for another
            email, or fields edited after sealing
    """
    if pending is None or not pending.seal:
        raise InvalidPendingError
    try:
        payload = jwt.decode(
            pending.seal,
            secret,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
            options={"require": ["exp", "sub"], "verify_exp": False},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidPendingError from e

    sealed = (payload.get("sub"), payload.get("pwd"), payload.get("fn"), payload.get("ln"))
    presented = (email, pending.hashed_password, pending.first_name, pending.last_name)
    if sealed != presented:
        raise InvalidPendingError
    return pending, datetime.fromtimestamp(payload["exp"], UTC)

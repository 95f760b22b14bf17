"""Stateless signing and verification of access/refresh token pairs.

Access and refresh tokens are signed with distinct HMAC-SHA256 secrets so one
can never be replayed as the other. Verification never touches storage; only
the refresh flow consults the session ledger afterwards.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import jwt
from pydantic import ValidationError as PydanticValidationError

from notemaker.core.modules.token.models import TokenClaims, TokenPair
from notemaker.errors import InvalidTokenError
from notemaker.utils import now as utc_now

if TYPE_CHECKING:
    from notemaker.config import Config

ALGORITHM = "HS256"


class TokenIssuer:
    """Mints and verifies signed token pairs."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_config(cls, config: Config) -> TokenIssuer:
        return cls(
            access_secret=config.jwt_secret,
            refresh_secret=config.jwt_refresh_secret,
            access_ttl=timedelta(minutes=config.access_token_ttl_minutes),
            refresh_ttl=timedelta(days=config.refresh_token_ttl_days),
        )

    def issue(self, claims: TokenClaims, now: datetime | None = None) -> TokenPair:
        """Sign an access token and a refresh token for the same claims."""
        issued_at = now or utc_now()
        return TokenPair(
            access_token=self._sign(claims, self._access_secret, issued_at, self.access_ttl),
            refresh_token=self._sign(claims, self._refresh_secret, issued_at, self.refresh_ttl),
        )

    def verify_access(self, token: str) -> TokenClaims:
        return self._verify(token, self._access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self._verify(token, self._refresh_secret)

    @staticmethod
    def _sign(claims: TokenClaims, secret: str, issued_at: datetime, ttl: timedelta) -> str:
        payload: dict[str, Any] = {
            **claims.to_payload(),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": uuid4().hex,  # keeps tokens minted in the same second distinct
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    @staticmethod
    def _verify(token: str, secret: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["exp", "iat"]})
            return TokenClaims.model_validate(payload)
        except (jwt.InvalidTokenError, PydanticValidationError) as e:
            raise InvalidTokenError from e

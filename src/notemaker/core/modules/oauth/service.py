import base64
import json
from typing import Any
from urllib.parse import quote, urlencode

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError
from pymongo.asynchronous.database import AsyncDatabase

from notemaker.core.core import Service
from notemaker.core.modules.auth.models import AuthResult
from notemaker.core.modules.oauth.models import GoogleProfile
from notemaker.errors import ExchangeFailedError, MissingCodeError, MissingEmailError, ProfileFetchFailedError

logger = structlog.get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPE = "openid email profile"


def build_client_redirect(client_url: str, result: AuthResult) -> str:
    """Client callback URL carrying tokens and a user projection in the fragment.

    The fragment is never sent to servers, so tokens stay out of access logs.
    """
    user = {
        "id": str(result.user.id),
        "email": result.user.email,
        "firstName": result.user.first_name,
        "lastName": result.user.last_name,
        "isEmailVerified": True,
    }
    encoded_user = base64.b64encode(json.dumps(user).encode("utf-8")).decode("ascii")
    fragment = "&".join(
        [
            f"access={quote(result.tokens.access_token, safe='')}",
            f"refresh={quote(result.tokens.refresh_token, safe='')}",
            f"user={quote(encoded_user, safe='')}",
        ]
    )
    return f"{client_url}/auth/callback#{fragment}"


class GoogleOAuthService(Service):
    """Federates Google accounts into local users via the authorization-code flow."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._http: httpx.AsyncClient | None = None

    async def on_start(self) -> None:
        self._http = httpx.AsyncClient(timeout=30.0, follow_redirects=False)

    async def on_stop(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("HTTP client not started")
        return self._http

    def authorization_url(self, state: str | None = None) -> str:
        """Provider consent URL requesting ``openid email profile`` with offline access."""
        config = self.core.config
        params = {
            "client_id": config.google_client_id,
            "redirect_uri": config.google_callback_url.rstrip("/"),
            "response_type": "code",
            "scope": SCOPE,
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTH_URL}?{urlencode(params, quote_via=quote)}"

    async def handle_callback(self, code: str | None) -> str:
        """Exchange ``code``, sign the user in, and return the client redirect URL."""
        if not code:
            raise MissingCodeError
        access_token = await self._exchange_code(code)
        profile = await self._fetch_profile(access_token)
        if not profile.email:
            raise MissingEmailError

        result = await self.core.services.auth.sign_in_federated(profile.email, profile.first_name, profile.last_name)
        logger.info("oauth_sign_in", user_id=str(result.user.id))
        return build_client_redirect(self.core.config.resolved_client_url, result)

    async def _exchange_code(self, code: str) -> str:
        config = self.core.config
        data = {
            "code": code,
            "client_id": config.google_client_id,
            "client_secret": config.google_client_secret,
            "redirect_uri": config.google_callback_url.rstrip("/"),
            "grant_type": "authorization_code",
        }
        try:
            response = await self.http.post(GOOGLE_TOKEN_URL, data=data, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.warning("oauth_token_request_failed", error=str(e))
            raise ExchangeFailedError from e
        if response.is_error:
            logger.warning("oauth_token_error", status_code=response.status_code, body=response.text[:500])
            raise ExchangeFailedError

        try:
            payload = response.json()
        except ValueError as e:
            raise ExchangeFailedError from e
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            logger.warning("oauth_no_access_token")
            raise ExchangeFailedError
        return str(access_token)

    async def _fetch_profile(self, access_token: str) -> GoogleProfile:
        try:
            response = await self.http.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            logger.warning("oauth_userinfo_request_failed", error=str(e))
            raise ProfileFetchFailedError from e
        if response.is_error:
            logger.warning("oauth_userinfo_error", status_code=response.status_code, body=response.text[:500])
            raise ProfileFetchFailedError

        try:
            return GoogleProfile.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise ProfileFetchFailedError from e

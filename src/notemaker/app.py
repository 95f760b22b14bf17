from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from notemaker.config import Config
from notemaker.core.core import Core
from notemaker.core.modules.auth.models import AuthResult, SignupStarted
from notemaker.core.modules.auth.pending import PendingRegistration
from notemaker.core.modules.note.models import Note
from notemaker.core.modules.token.models import TokenClaims, TokenPair
from notemaker.core.modules.user.models import UserView
from notemaker.core.pagination import PaginationResult


class App:
    """Facade for all application operations, authenticates callers before delegating to Core."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Authentication ===
    async def request_signup(self, email: str, password: str, first_name: str, last_name: str) -> SignupStarted:
        """Start email signup: send OTP, return the pending registration."""
        return await self._core.services.auth.request_signup(email, password, first_name, last_name)

    async def verify_signup_otp(self, email: str, otp: str, temp_data: PendingRegistration | None) -> AuthResult:
        """Finish email signup and sign the new user in."""
        return await self._core.services.auth.verify_signup_otp(email, otp, temp_data)

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate user and create session."""
        return await self._core.services.auth.login(email, password)

    async def refresh(self, refresh_token: str | None) -> TokenPair:
        """Rotate a refresh token."""
        return await self._core.services.auth.refresh(refresh_token)

    async def logout(self, refresh_token: str | None) -> None:
        """Invalidate the session behind a refresh token."""
        await self._core.services.auth.logout(refresh_token)

    async def forgot_password(self, email: str) -> None:
        await self._core.services.auth.forgot_password(email)

    async def reset_password(self, email: str, otp: str, new_password: str) -> None:
        await self._core.services.auth.reset_password(email, otp, new_password)

    def google_authorization_url(self, state: str | None) -> str:
        return self._core.services.oauth.authorization_url(state)

    async def google_callback(self, code: str | None) -> str:
        """Complete Google sign-in and return the client redirect URL."""
        return await self._core.services.oauth.handle_callback(code)

    def google_failure_url(self) -> str:
        return f"{self._core.config.resolved_client_url}/auth/login?error=oauth_failed"

    def authenticate(self, access_token: str | None) -> TokenClaims:
        """Verify an access token."""
        return self._core.services.access.authenticate(access_token)

    # === Profile ===
    async def get_current_user(self, access_token: str) -> UserView:
        """Get current authenticated user profile."""
        user = await self._core.services.access.current_user(access_token)
        return UserView.from_domain(user)

    # === Notes ===
    async def get_notes(
        self,
        access_token: str,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        tags: list[str] | None = None,
    ) -> PaginationResult[Note]:
        """Get paginated notes of the current user, optionally searched and tag-filtered."""
        claims = self.authenticate(access_token)
        return await self._core.services.note.list_notes(claims.user_id, page, limit, search, tags)

    async def get_note(self, access_token: str, note_id: UUID) -> Note:
        claims = self.authenticate(access_token)
        return await self._core.services.note.get_note(claims.user_id, note_id)

    async def create_note(self, access_token: str, title: str, content: str, tags: list[str]) -> Note:
        claims = self.authenticate(access_token)
        return await self._core.services.note.create_note(claims.user_id, title, content, tags)

    async def update_note(self, access_token: str, note_id: UUID, title: str, content: str, tags: list[str]) -> Note:
        claims = self.authenticate(access_token)
        return await self._core.services.note.update_note(claims.user_id, note_id, title, content, tags)

    async def delete_note(self, access_token: str, note_id: UUID) -> None:
        claims = self.authenticate(access_token)
        await self._core.services.note.delete_note(claims.user_id, note_id)

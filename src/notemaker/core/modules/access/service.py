from notemaker.core.core import Service
from notemaker.core.modules.token.models import TokenClaims
from notemaker.core.modules.user.models import User
from notemaker.errors import InvalidTokenError, MissingTokenError, UserNotFoundError


class AccessService(Service):
    def authenticate(self, access_token: str | None) -> TokenClaims:
        """Verify a bearer access token without touching storage."""
        if not access_token:
            raise MissingTokenError("Access token required")
        return self.core.tokens.verify_access(access_token)

    async def current_user(self, access_token: str | None) -> User:
        """Resolve the user behind an access token."""
        claims = self.authenticate(access_token)
        try:
            return await self.core.services.user.get_user(claims.user_id)
        except UserNotFoundError as e:
            raise InvalidTokenError from e

from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notemaker.app import App
from notemaker.errors import MissingTokenError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_access_token(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> str:
    """Get and verify the access token from the Authorization Bearer header."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise MissingTokenError("Access token required")
    app.authenticate(credentials.credentials)
    return credentials.credentials


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AccessTokenDep = Annotated[str, Depends(get_access_token)]

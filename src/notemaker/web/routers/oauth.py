from typing import Annotated

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from notemaker.errors import UserError
from notemaker.web.deps import AppDep

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["oauth"])


@router.get(
    "/auth/google",
    summary="Start Google sign-in",
    description="Redirect to the Google consent screen. `state` is passed through unchanged.",
    operation_id="startGoogleOAuth",
    response_class=RedirectResponse,
    responses={307: {"description": "Redirect to Google"}},
)
async def start_google_oauth(
    app: AppDep, state: Annotated[str | None, Query(description="Opaque value returned on callback")] = None
) -> RedirectResponse:
    return RedirectResponse(app.google_authorization_url(state))


@router.get(
    "/auth/google/callback",
    summary="Google sign-in callback",
    description=(
        "Exchange the authorization code and redirect to the client's `/auth/callback` page with "
        "`access`, `refresh`, and base64 JSON `user` in the URL fragment. Any failure redirects "
        "to the client's login page."
    ),
    operation_id="googleOAuthCallback",
    response_class=RedirectResponse,
    responses={307: {"description": "Redirect to the client"}},
)
async def google_oauth_callback(
    app: AppDep, code: Annotated[str | None, Query(description="Authorization code from Google")] = None
) -> RedirectResponse:
    try:
        target = await app.google_callback(code)
    except UserError as e:
        logger.warning("oauth_callback_failed", reason=str(e))
        return RedirectResponse(app.google_failure_url())
    except Exception:
        logger.exception("oauth_callback_error")
        return RedirectResponse(app.google_failure_url())
    return RedirectResponse(target)

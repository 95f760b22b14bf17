from fastapi import APIRouter

from notemaker.core.modules.user.models import UserView
from notemaker.web.deps import AccessTokenDep, AppDep
from notemaker.web.openapi import ApiResponse, ErrorResponse

router = APIRouter(tags=["profile"])


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getCurrentUserProfile",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Invalid or expired access token"},
    },
)
async def get_profile(app: AppDep, access_token: AccessTokenDep) -> ApiResponse[UserView]:
    return ApiResponse(data=await app.get_current_user(access_token))

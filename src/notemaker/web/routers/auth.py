import re
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidatorFunctionWrapHandler, field_validator
from pydantic import ValidationError as PydanticValidationError

from notemaker.core.modules.auth.models import AuthResult, RefreshResult, SignupStarted
from notemaker.core.modules.auth.pending import PendingRegistration
from notemaker.web.deps import AppDep
from notemaker.web.openapi import ApiResponse, ErrorResponse

router = APIRouter(tags=["auth"])

# Prefix match: at least one of each class, then only allowed characters
PASSWORD_COMPLEXITY_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, an OTP has been sent"


def _check_email(value: Any, handler: ValidatorFunctionWrapHandler) -> str:
    if isinstance(value, str):
        value = value.strip()
    try:
        return handler(value)
    except PydanticValidationError as e:
        raise ValueError("Please enter a valid email address") from e


class AuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignupRequest(AuthRequest):
    """Email signup request."""

    email: EmailStr = Field(..., description="Email address, becomes the login")
    password: str = Field(..., min_length=8, description="At least 8 characters with upper, lower, digit, special")
    first_name: str = Field(..., alias="firstName", min_length=2, max_length=50)
    last_name: str = Field(..., alias="lastName", min_length=2, max_length=50)

    check_email = field_validator("email", mode="wrap")(_check_email)

    @field_validator("password")
    @classmethod
    def check_password_complexity(cls, value: str) -> str:
        if not PASSWORD_COMPLEXITY_RE.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, "
                "one number, and one special character"
            )
        return value


class VerifyOtpRequest(AuthRequest):
    """Signup OTP verification request."""

    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$", description="6-digit code from the email")
    temp_data: PendingRegistration | None = Field(None, alias="tempData", description="Echo of signup tempData")

    check_email = field_validator("email", mode="wrap")(_check_email)


class LoginRequest(AuthRequest):
    """Authentication request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")

    check_email = field_validator("email", mode="wrap")(_check_email)


class RefreshTokenRequest(AuthRequest):
    refresh_token: str | None = Field(None, alias="refreshToken")


class ForgotPasswordRequest(AuthRequest):
    email: EmailStr

    check_email = field_validator("email", mode="wrap")(_check_email)


class ResetPasswordRequest(AuthRequest):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$")
    new_password: str = Field(..., alias="newPassword", min_length=8)

    check_email = field_validator("email", mode="wrap")(_check_email)


@router.post(
    "/auth/signup/email",
    summary="Start email signup",
    description=(
        "Send a 6-digit OTP to the email address and return `tempData`, which must be sent back "
        "unchanged to `/auth/verify-otp`. No account exists until the OTP is verified."
    ),
    operation_id="signupEmail",
    response_model_exclude_none=True,
    responses={
        200: {"description": "OTP sent"},
        400: {"model": ErrorResponse, "description": "Invalid input or email already registered"},
    },
)
async def signup_email(request: SignupRequest, app: AppDep) -> ApiResponse[SignupStarted]:
    started = await app.request_signup(request.email, request.password, request.first_name, request.last_name)
    return ApiResponse(message="OTP sent to your email address", data=started)


@router.post(
    "/auth/verify-otp",
    summary="Verify signup OTP",
    description="Verify the emailed OTP, create the account, and sign in.",
    operation_id="verifyOtp",
    status_code=201,
    response_model_exclude_none=True,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid, expired, or already used OTP"},
    },
)
async def verify_otp(request: VerifyOtpRequest, app: AppDep) -> ApiResponse[AuthResult]:
    result = await app.verify_signup_otp(request.email, request.otp, request.temp_data)
    return ApiResponse(message="Account created successfully", data=result)


@router.post(
    "/auth/login/email",
    summary="Authenticate user",
    description="Authenticate with email and password to receive an access/refresh token pair.",
    operation_id="loginEmail",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login_email(request: LoginRequest, app: AppDep) -> ApiResponse[AuthResult]:
    result = await app.login(request.email, request.password)
    return ApiResponse(message="Login successful", data=result)


@router.post(
    "/auth/refresh",
    summary="Refresh tokens",
    description="Exchange a refresh token for a new token pair. The old refresh token stops working.",
    operation_id="refreshTokens",
    response_model_exclude_none=True,
    responses={
        200: {"description": "New token pair"},
        401: {"model": ErrorResponse, "description": "Refresh token missing"},
        403: {"model": ErrorResponse, "description": "Refresh token invalid, expired, or revoked"},
    },
)
async def refresh_tokens(request: RefreshTokenRequest, app: AppDep) -> ApiResponse[RefreshResult]:
    tokens = await app.refresh(request.refresh_token)
    return ApiResponse(message="Tokens refreshed successfully", data=RefreshResult(tokens=tokens))


@router.post(
    "/auth/logout",
    summary="End session",
    description="Invalidate the session behind the refresh token. Always succeeds.",
    operation_id="logout",
    response_model_exclude_none=True,
)
async def logout(request: RefreshTokenRequest, app: AppDep) -> ApiResponse[None]:
    await app.logout(request.refresh_token)
    return ApiResponse(message="Logged out successfully")


@router.post(
    "/auth/forgot-password",
    summary="Request password reset",
    description="Email a reset OTP if an account exists. The response is identical either way.",
    operation_id="forgotPassword",
    response_model_exclude_none=True,
)
async def forgot_password(request: ForgotPasswordRequest, app: AppDep) -> ApiResponse[None]:
    await app.forgot_password(request.email)
    return ApiResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/auth/reset-password",
    summary="Reset password",
    description="Set a new password using the emailed reset OTP. Signs out every existing session.",
    operation_id="resetPassword",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Password changed"},
        400: {"model": ErrorResponse, "description": "Invalid or expired OTP"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def reset_password(request: ResetPasswordRequest, app: AppDep) -> ApiResponse[None]:
    await app.reset_password(request.email, request.otp, request.new_password)
    return ApiResponse(message="Password has been reset successfully")

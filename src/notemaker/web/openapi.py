from typing import Any, Generic, TypeVar

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

# Endpoints reachable without a bearer access token
PUBLIC_ENDPOINTS = {
    ("POST", "/api/auth/signup/email"),
    ("POST", "/api/auth/verify-otp"),
    ("POST", "/api/auth/login/email"),
    ("POST", "/api/auth/refresh"),
    ("POST", "/api/auth/logout"),
    ("POST", "/api/auth/forgot-password"),
    ("POST", "/api/auth/reset-password"),
    ("GET", "/api/auth/google"),
    ("GET", "/api/auth/google/callback"),
    ("GET", "/health"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Note Maker API",
            version="0.1.0",
            summary="Short text notes with email/OTP and Google sign-in",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Access token from login, OTP verification, or refresh",
            },
        }

        # Apply security globally (overridden for public endpoints)
        openapi_schema["security"] = [{"BearerAuth": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


T = TypeVar("T")


class FieldError(BaseModel):
    """Validation failure of a single request field."""

    field: str = Field(..., description="Request field name")
    message: str = Field(..., description="What is wrong with it")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every JSON response."""

    success: bool = Field(True, description="Whether the operation succeeded")
    message: str | None = Field(None, description="Human-readable outcome")
    data: T | None = Field(None, description="Operation result")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = Field(False, description="Always false")
    message: str = Field(..., description="Human-readable error message")
    errors: list[FieldError] | None = Field(None, description="Field-level validation failures")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "message": "Invalid email or password"},
                {"success": False, "message": "OTP has expired"},
                {
                    "success": False,
                    "message": "Validation failed",
                    "errors": [{"field": "email", "message": "Please enter a valid email address"}],
                },
            ]
        }
    }

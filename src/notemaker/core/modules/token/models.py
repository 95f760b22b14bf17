from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TokenClaims(BaseModel):
    """Identity carried by both access and refresh tokens."""

    user_id: UUID = Field(..., alias="userId", description="User ID")
    email: str = Field(..., description="User email")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_payload(self) -> dict[str, str]:
        return {"userId": str(self.user_id), "email": self.email}


class TokenPair(BaseModel):
    """Signed access/refresh token pair returned to clients."""

    access_token: str = Field(..., alias="accessToken", description="Short-lived bearer token for API calls")
    refresh_token: str = Field(..., alias="refreshToken", description="Long-lived token used to mint new pairs")

    model_config = ConfigDict(populate_by_name=True)

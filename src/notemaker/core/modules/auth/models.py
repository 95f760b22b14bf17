from pydantic import BaseModel, ConfigDict, Field

from notemaker.core.modules.auth.pending import PendingRegistration
from notemaker.core.modules.token.models import TokenPair
from notemaker.core.modules.user.models import UserView


class SignupStarted(BaseModel):
    """First signup step done: OTP sent, account not yet created."""

    email: str
    temp_data: PendingRegistration = Field(..., alias="tempData")

    model_config = ConfigDict(populate_by_name=True)


class AuthResult(BaseModel):
    """Signed-in user with a fresh token pair."""

    user: UserView
    tokens: TokenPair


class RefreshResult(BaseModel):
    tokens: TokenPair

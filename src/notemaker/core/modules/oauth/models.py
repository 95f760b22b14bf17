from pydantic import BaseModel


class GoogleProfile(BaseModel):
    """Subset of the Google userinfo response used for sign-in."""

    id: str | None = None
    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None

    @property
    def first_name(self) -> str:
        return self.given_name or self.name or "User"

    @property
    def last_name(self) -> str:
        return self.family_name or ""

from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    jwt_secret: str = Field(min_length=32)  # Signs access tokens
    jwt_refresh_secret: str = Field(min_length=32)  # Signs refresh tokens, must differ from jwt_secret
    jwt_pending_secret: str = Field(min_length=32)  # Seals pending registrations between signup steps
    access_token_ttl_minutes: int = 15
    refresh_token_ttl_days: int = 7
    otp_ttl_minutes: int = 10
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    cors_origins: list[str] = []
    client_url: str | None = None  # URL of the single-page client, e.g. https://notes.example.com
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = "http://localhost:5000/api/auth/google/callback"
    smtp_host: str | None = None  # Mail delivery is skipped when unset
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None
    smtp_use_tls: bool = True

    model_config = {
        "env_file": [".env"],
        "env_prefix": "NOTEMAKER_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_distinct_secrets(self) -> Self:
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError("jwt_secret and jwt_refresh_secret must differ")
        return self

    @property
    def resolved_client_url(self) -> str:
        """Client origin without trailing slash: explicit client_url, else first CORS origin."""
        if self.client_url:
            return self.client_url.rstrip("/")
        if self.cors_origins:
            return self.cors_origins[0].rstrip("/")
        return "http://localhost:5173"

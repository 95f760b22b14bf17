"""Test data and helpers shared across test modules."""

from dataclasses import dataclass, field

from fastapi.testclient import TestClient

from notemaker.config import Config
from notemaker.core.modules.otp.models import OtpPurpose

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"
PENDING_SECRET = "pending-secret-for-tests-0123456789abcdef"

EMAIL = "a@b.com"
PASSWORD = "Abcdef1!"
FIRST_NAME = "Jo"
LAST_NAME = "Li"


@dataclass
class SentOtp:
    email: str
    code: str
    purpose: OtpPurpose


@dataclass
class Outbox:
    """Collects OTP messages instead of sending them."""

    sent: list[SentOtp] = field(default_factory=list)

    def last_code(self, email: str, purpose: OtpPurpose | None = None) -> str:
        for message in reversed(self.sent):
            if message.email == email and (purpose is None or message.purpose == purpose):
                return message.code
        raise AssertionError(f"No OTP sent to {email}")


def make_config(**overrides: object) -> Config:
    """Test configuration with cheap bcrypt and distinct secrets."""
    values: dict[str, object] = {
        "database_url": "mongodb://localhost:27017/notemaker_test",
        "host": "127.0.0.1",
        "port": 5000,
        "debug": True,
        "jwt_secret": ACCESS_SECRET,
        "jwt_refresh_secret": REFRESH_SECRET,
        "jwt_pending_secret": PENDING_SECRET,
        "bcrypt_rounds": 4,
        "client_url": "http://client.test",
        "google_client_id": "google-client-id",
        "google_client_secret": "google-client-secret",
        "google_callback_url": "http://api.test/api/auth/google/callback",
    }
    values.update(overrides)
    return Config(_env_file=None, **values)  # type: ignore[arg-type]


def signup(client: TestClient, outbox: Outbox, email: str = EMAIL) -> dict:
    """Register through the API and return the verify-otp response data."""
    response = client.post(
        "/api/auth/signup/email",
        json={"email": email, "password": PASSWORD, "firstName": FIRST_NAME, "lastName": LAST_NAME},
    )
    assert response.status_code == 200, response.text
    started = response.json()["data"]
    response = client.post(
        "/api/auth/verify-otp",
        json={"email": email, "otp": outbox.last_code(started["email"]), "tempData": started["tempData"]},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator

import pytest

# Import the facade first: it wires the service registry before any service module is imported
from notemaker.app import App
from notemaker.config import Config
from notemaker.core.core import Core
from notemaker.core.modules.mail.service import MailService
from notemaker.core.modules.otp.models import OtpPurpose
from tests.fakes import FakeDatabase
from tests.support import Outbox, SentOtp, make_config


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def outbox(monkeypatch: pytest.MonkeyPatch) -> Outbox:
    """Capture OTP messages for every MailService instance."""
    box = Outbox()

    async def send_otp(_service: MailService, email: str, code: str, purpose: OtpPurpose) -> bool:
        box.sent.append(SentOtp(email=email, code=code, purpose=purpose))
        return True

    monkeypatch.setattr(MailService, "send_otp", send_otp)
    return box


@pytest.fixture
async def core(config: Config, database: FakeDatabase, outbox: Outbox) -> AsyncGenerator[Core]:
    """Started core backed by the in-memory database."""
    core = Core(config, database)  # type: ignore[arg-type]
    async with core.lifespan():
        yield core


@pytest.fixture
def app(config: Config, database: FakeDatabase, outbox: Outbox) -> App:
    """Application facade backed by the in-memory database (not started)."""
    return App(config, database)  # type: ignore[arg-type]

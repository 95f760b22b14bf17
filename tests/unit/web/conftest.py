"""Fixtures for HTTP API tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from notemaker.app import App
from notemaker.config import Config
from notemaker.web.server import create_fastapi_app


@pytest.fixture
def client(app: App, config: Config) -> Iterator[TestClient]:
    """Client for the API with the application lifespan running."""
    with TestClient(create_fastapi_app(app, config), raise_server_exceptions=False) as client:
        yield client

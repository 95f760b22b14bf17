from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from notemaker.app import App
from notemaker.config import Config
from notemaker.errors import UserError
from notemaker.utils import now
from notemaker.web.error_handlers import (
    general_exception_handler,
    http_exception_handler,
    request_validation_handler,
    user_error_handler,
)
from notemaker.web.openapi import set_custom_openapi
from notemaker.web.routers import auth_router, notes_router, oauth_router, profile_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        # Store app instance and config in app state
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Note Maker API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    # Health check endpoint (at root level, not under /api)
    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        return {"success": True, "message": "Server is running", "data": {"timestamp": now().isoformat()}}

    app.include_router(auth_router, prefix="/api")
    app.include_router(oauth_router, prefix="/api")
    app.include_router(profile_router, prefix="/api")
    app.include_router(notes_router, prefix="/api")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app

from notemaker.web.routers.auth import router as auth_router
from notemaker.web.routers.notes import router as notes_router
from notemaker.web.routers.oauth import router as oauth_router
from notemaker.web.routers.profile import router as profile_router

__all__ = [
    "auth_router",
    "notes_router",
    "oauth_router",
    "profile_router",
]

"""Route handlers for the Web API."""

from lingoxp.web.routes.health import router as health_router
from lingoxp.web.routes.progress import router as progress_router
from lingoxp.web.routes.user_level import router as user_level_router

__all__ = [
    "health_router",
    "progress_router",
    "user_level_router",
]

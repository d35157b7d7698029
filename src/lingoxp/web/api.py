"""FastAPI application factory.

Main entry point for the lingoxp Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lingoxp import __version__
from lingoxp.config.app_config import load_app_config
from lingoxp.db.database import init_db
from lingoxp.web.routes import (
    health_router,
    progress_router,
    user_level_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    db_path = init_db(config.database.path)
    logger.info(
        "api.startup",
        db_path=str(db_path.absolute()),
        auth_tokens=len(config.auth.get_tokens()),
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="lingoxp API",
        description="XP and level progression for English learners",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for the web dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(progress_router)
    app.include_router(user_level_router)

    return app


# Default app instance for uvicorn
app = create_app()

"""FastAPI application exposing the Tosan OAuth flow."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from tosan_oauth import __version__
from tosan_oauth.api.routers import auth
from tosan_oauth.config import get_settings
from tosan_oauth.logging import get_logger, setup_logging

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Configures logging from settings on startup.
    """
    settings = get_settings()
    setup_logging(
        level="DEBUG" if settings.debug else settings.log_level,
        log_file=settings.log_file,
        format_style=settings.log_format,
    )
    config = settings.tosan_config()
    logger.info(
        f"Starting Tosan OAuth API | sandbox={config.sandbox} "
        f"profile_mode={config.profile_mode.value}"
    )

    yield

    logger.info("Shutting down Tosan OAuth API")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="Tosan OAuth API",
        description="Login with Tosan (Boom) bank accounts over OAuth 2.0.",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(auth.router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    return app


app = create_app()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .api import conversations_router, charts_router
from .config import configure_logging, get_config

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()
    config = get_config()

    app = FastAPI(
        title="AI Analyst API",
        description="Conversational data analysis with renderable chart suggestions",
        version="1.0.0",
        docs_url="/docs" if config.is_development_mode() else None,
        redoc_url="/redoc" if config.is_development_mode() else None,
    )

    # Configure CORS
    if config.ENABLE_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_routers(app)
    return app


def register_routers(app: FastAPI) -> None:
    """Register all routers with the application."""

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Include routers for different feature sets
    app.include_router(conversations_router)
    app.include_router(charts_router)

"""
Main application module.

This module initializes and configures the FastAPI application.
"""

import logging
from fastapi import FastAPI

from meetlink import __version__
from meetlink.adapters.kv.factory import KeyValueStoreFactory
from meetlink.middleware.error_handler import add_error_handlers
from meetlink.routes.auth import router as auth_router
from meetlink.routes.legal import router as legal_router
from meetlink.routes.meet import router as meet_router
from meetlink.utils.config import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with routes and error handlers."""
    app = FastAPI(
        title="meet-link",
        description="Cached per-user Google Meet links with opaque direct links",
        version=__version__,
        docs_url=None,
        redoc_url=None
    )

    add_error_handlers(app)

    app.include_router(meet_router)
    app.include_router(auth_router)
    app.include_router(legal_router)

    @app.on_event("startup")
    async def startup_event():
        """Open the keyed store on application startup."""
        try:
            logger.info("Starting up application...")
            await KeyValueStoreFactory.get_store(get_settings())
            logger.info("Application startup complete")
        except Exception as e:
            logger.error(f"Error during startup: {str(e)}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Close the keyed store on application shutdown."""
        try:
            logger.info("Shutting down application...")
            await KeyValueStoreFactory.close_store()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}")
            raise

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()

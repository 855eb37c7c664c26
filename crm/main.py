"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from crm.api import auth, github, health, projects
from crm.config import Settings, get_settings
from crm.database import Database
from crm.documents import DocumentStore
from crm.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    database: Database = app.state.database
    documents: DocumentStore = app.state.documents

    # Startup: make sure tables and uniqueness indexes exist before serving
    database.init_schema()
    documents.ensure_indexes()
    logger.info(f"Application started ({app.state.settings.environment})")

    yield

    # Shutdown: drain and close both pools
    documents.close()
    database.dispose()
    logger.info("Application stopped")


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    documents: DocumentStore | None = None,
) -> FastAPI:
    """Build the application around explicitly constructed datastores."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Project CRM API",
        description="Bookmark GitHub repositories and other projects per user",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.documents = documents or DocumentStore.from_settings(settings)

    register_exception_handlers(app)

    # Register routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(projects.router)
    app.include_router(github.router)

    return app


configure_logging(get_settings())
app = create_app()

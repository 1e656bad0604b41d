"""FastAPI application bootstrap."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from ecuratif.api.routers import health, imports, jobs
from ecuratif.core.config import get_settings
from ecuratif.core.logging import configure_logging
from ecuratif.db.session import init_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.auto_create_schema:
        logger.info("Creating missing database tables")
        init_schema()
    yield


def create_app() -> FastAPI:
    """Instantiate the FastAPI app and include top-level routers."""
    configure_logging()
    settings = get_settings()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(imports.router, prefix="/api/imports", tags=["imports"])
    app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])

    return app


app = create_app()

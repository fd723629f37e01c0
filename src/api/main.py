"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.dependencies import (
    close_database_connections,
    get_write_engine,
)
from infrastructure.dependencies import close_branch_pools
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from provisioning.presentation import routes as provisioning_routes
from tenancy.presentation import routes as tenancy_routes


@asynccontextmanager
async def schemaforge_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Shared engine and branch pool lifecycle (created lazily, closed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    yield

    await close_database_connections()
    await close_branch_pools()


app = FastAPI(
    title="SchemaForge API",
    description="Dynamic multi-tenant schema provisioning for generated applications",
    version=__version__,
    lifespan=schemaforge_lifespan,
)

# Include bounded context routes
app.include_router(provisioning_routes.router)
app.include_router(tenancy_routes.router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db(
    engine: Annotated[AsyncEngine, Depends(get_write_engine)],
) -> dict:
    """Check the shared database connection."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return {
            "status": "error",
            "connected": False,
            "error": str(e),
        }

    return {"status": "ok", "connected": True}

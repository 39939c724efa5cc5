"""
FastAPI application entry point.

Configures logging, the database, middleware, routes, and exception handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prodmatic.core import database
from prodmatic.core.config import settings
from prodmatic.core.dependencies import close_redis
from prodmatic.core.error_handlers import register_error_handlers
from prodmatic.core.observability import setup_logging

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    if database.db_manager is None:
        database.init_db(
            str(settings.DATABASE_URL),
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    logger.info("Starting ProdMatic API in %s mode", settings.ENVIRONMENT)
    yield
    logger.info("Shutting down ProdMatic API")
    await database.get_db_manager().dispose()
    await close_redis()


app = FastAPI(
    title="ProdMatic API",
    description="Multi-tenant product management platform",
    version=API_VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    db_ok = await database.get_db_manager().health_check()
    return {
        "status": "ok" if db_ok else "degraded",
        "database": "ok" if db_ok else "unavailable",
        "environment": settings.ENVIRONMENT,
        "version": API_VERSION,
    }


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "message": "ProdMatic API",
        "version": API_VERSION,
        "docs": "/api/docs" if settings.DEBUG else "disabled",
    }


from prodmatic.routers import (  # noqa: E402
    activity,
    auth,
    documents,
    experiments,
    feature_flags,
    ideas,
    kpis,
    okrs,
    organizations,
    personas,
    products,
    releases,
    research,
    roadmap,
    sprints,
    tasks,
    teams,
)

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(organizations.router, prefix="/api/v1/organizations", tags=["Organizations"])
app.include_router(activity.router, prefix="/api/v1", tags=["Activity"])
app.include_router(products.router, prefix="/api/v1", tags=["Products"])
app.include_router(ideas.router, prefix="/api/v1", tags=["Ideas"])
app.include_router(tasks.router, prefix="/api/v1", tags=["Tasks"])
app.include_router(sprints.router, prefix="/api/v1", tags=["Sprints"])
app.include_router(releases.router, prefix="/api/v1", tags=["Releases"])
app.include_router(okrs.router, prefix="/api/v1", tags=["OKRs"])
app.include_router(roadmap.router, prefix="/api/v1", tags=["Roadmap"])
app.include_router(experiments.router, prefix="/api/v1", tags=["Experiments"])
app.include_router(teams.router, prefix="/api/v1", tags=["Teams"])
app.include_router(documents.router, prefix="/api/v1", tags=["Documents"])
app.include_router(personas.router, prefix="/api/v1", tags=["Personas"])
app.include_router(feature_flags.router, prefix="/api/v1", tags=["Feature Flags"])
app.include_router(kpis.router, prefix="/api/v1", tags=["KPIs"])
app.include_router(research.router, prefix="/api/v1", tags=["Research"])

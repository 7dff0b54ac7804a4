"""FastAPI application factory."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from benglish.api.v1.api import api_router
from benglish.config import settings
from benglish.db.session import Database
from benglish.utils.exceptions import register_exception_handlers


tags_metadata: List[dict[str, str]] = [
    {"name": "auth", "description": "Register users, issue tokens and manage accounts."},
    {"name": "categories", "description": "Browse vocabulary categories and their word pairs."},
    {"name": "progress", "description": "Record learned items and wrong answers."},
    {"name": "review", "description": "Fetch and complete review batches."},
    {"name": "daily-progress", "description": "Per-day learning counters."},
]


def create_app(database: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    ``database`` lets tests hand in their own engine; otherwise one is built
    from ``DATABASE_URL`` on startup and disposed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = database is None
        app.state.database = database or Database.from_url()
        logger.info("Application startup", project=settings.PROJECT_NAME)
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
            logger.info("Application shutdown")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Vocabulary learning backend for Romanian speakers learning English.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.API_V1_STR)
    if settings.MEDIA_BASE_URL.startswith("/"):
        app.mount(
            settings.MEDIA_BASE_URL,
            StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False),
            name="media",
        )
    return app


app = create_app()

"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rolegraph.api.error_handlers import register_exception_handlers
from rolegraph.api.routers import get_api_router
from rolegraph.core.config import AppSettings, get_settings
from rolegraph.core.database import engine
from rolegraph.core.logging import configure_logging
from rolegraph.models import Base


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Application lifespan context for startup/shutdown hooks."""

    settings = get_settings()
    # Staging and production schemas are managed by alembic.
    if settings.environment in ("local", "test"):
        Base.metadata.create_all(bind=engine)

    yield


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Rolegraph: group roles & appointments",
        version="1.0.0",
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()

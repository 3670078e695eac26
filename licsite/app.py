"""
FastAPI application entry point for the site backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from licsite import home, routes, spa
from licsite.cache import ResponseCache
from licsite.config import Settings, get_settings
from licsite.db import DbClient, StoreUnavailable
from licsite.dependencies import build_db_client, build_response_cache
from licsite.errors import register_exception_handlers
from licsite.home import HomePageHandler
from licsite.schemas import HealthResponse
from licsite.site import SiteInfo

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    db_client: DbClient | None = None,
    response_cache: ResponseCache | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    logger.info(
        "Starting site backend: port=%s environment=%s database_url=%s",
        settings.port,
        settings.environment,
        "[REDACTED]" if settings.database_url else "Not set",
    )

    db_client = db_client or build_db_client(settings)
    try:
        db_client.ensure_schema()
    except StoreUnavailable:
        logger.exception("Database connection error; pages will render without ratings")

    response_cache = response_cache or build_response_cache(settings)

    app = FastAPI(
        title="LIC Neemuch Site Backend",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.db_client = db_client
    app.state.response_cache = response_cache
    app.state.home_page = HomePageHandler(
        db=db_client,
        cache=response_cache,
        site=SiteInfo(url=settings.site_url),
        ttl_seconds=settings.ssr_cache_ttl_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
        max_age=86400,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("Request received: %s %s", request.method, request.url.path)
        return await call_next(request)

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="OK")

    app.include_router(home.router)
    app.include_router(routes.router, prefix=settings.api_prefix)
    # Catch-all; must stay last.
    app.include_router(spa.router)
    return app

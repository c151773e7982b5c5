"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, settings as default_settings
from app.context import AppContext
from app.errors import install_exception_handlers
from app.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from app.routers import access, admin, bids, chat, content, forum, jobs, machinery, realtime

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. The context is created on startup and closed on shutdown."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        ctx = AppContext.build(settings)
        app.state.ctx = ctx
        await ctx.start()
        logger.info("Marketplace API started (%s, db=%s)", settings.env, settings.database_url)

        yield

        await ctx.close()

    app = FastAPI(
        title="B2B Plastics Marketplace",
        description="Job listings, per-job chat and bidding, site content and forum",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS - restrict to configured origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware (last added runs outermost)
    app.add_middleware(SecurityHeadersMiddleware, admin_prefix=f"{settings.api_prefix}/admin")
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

    install_exception_handlers(app)

    # Routers
    for module in (jobs, bids, chat, access, machinery, content, forum, admin):
        app.include_router(module.router, prefix=settings.api_prefix)
    app.include_router(content.write_router, prefix=settings.api_prefix)
    app.include_router(realtime.router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}

    return app


configure_logging(default_settings.log_level)
app = create_app()

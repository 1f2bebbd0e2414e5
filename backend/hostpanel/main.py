"""HostPanel FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostpanel import __version__
from hostpanel.config import settings
from hostpanel.database import async_session, close_db, init_db
from hostpanel.services import init_services, shutdown_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    _setup_logging()

    await init_db()

    # Admin bootstrap finishes before the first request is accepted
    async with async_session() as db:
        await init_services(db)
    logger.info("HostPanel v%s started — listening on %s:%s", __version__, settings.host, settings.port)

    try:
        yield
    finally:
        # === SHUTDOWN ===
        await shutdown_services()
        await close_db()
        logger.info("HostPanel shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app() -> FastAPI:
    """Application factory."""
    from hostpanel.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
        # Schema and docs would be the only unauthenticated routes besides login
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    # CORS: any origin; bearer tokens travel in headers, not cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "hostpanel.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.uvicorn_workers,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()

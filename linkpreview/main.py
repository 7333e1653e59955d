"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkpreview.api.routes import router
from linkpreview.cache.redis import ResponseCache, create_redis_client
from linkpreview.config import Settings, get_settings
from linkpreview.logging_config import setup_logging
from linkpreview.preview import build_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level, access_log=settings.access_log)
    logger.info("starting link preview service")

    redis_client = None
    app.state.cache = None
    if settings.redis_url:
        redis_client = await create_redis_client(
            settings.redis_url, timeout=settings.cache_timeout_seconds
        )
        app.state.cache = ResponseCache(
            redis_client, default_ttl=settings.subrequest_cache_ttl_seconds
        )

    app.state.client = build_client(
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.user_agent,
    )

    logger.info(
        "link preview service ready",
        extra={
            "cache_enabled": redis_client is not None,
            "fetch_timeout_seconds": settings.fetch_timeout_seconds,
            "allowed_origins": settings.allowed_origins,
        },
    )

    yield

    # Cleanup
    logger.info("shutting down link preview service")
    await app.state.client.aclose()
    if redis_client is not None:
        await redis_client.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Link Preview Service", lifespan=lifespan)
    app.state.settings = settings
    # Also answers OPTIONS preflight requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()

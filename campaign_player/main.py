import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from campaign_player.config import settings
from campaign_player.deps import mount_registry, telemetry
from campaign_player.routers import (
    analytics,
    backups,
    campaigns,
    player,
    profile,
    public,
    session,
    users,
    videos,
)

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        yield
    finally:
        mount_registry.clear()
        await telemetry.flush()


def create_app() -> FastAPI:
    _configure_logging()
    app = FastAPI(
        title="Campaign Player API",
        default_response_class=ORJSONResponse,
        lifespan=_app_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(public.router)
    app.include_router(player.router)
    app.include_router(session.router)
    app.include_router(campaigns.router)
    app.include_router(videos.router)
    app.include_router(users.router)
    app.include_router(profile.router)
    app.include_router(analytics.router)
    app.include_router(backups.router)

    return app


app = create_app()

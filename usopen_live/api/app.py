from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from usopen_live.config.settings import AppSettings, settings as default_settings
from usopen_live.feeds.base_client import build_http_client
from usopen_live.feeds.points_client import LivePointsClient
from usopen_live.feeds.scoreboard_client import ScoreboardClient
from usopen_live.normalization.normalizer import Normalizer
from usopen_live.normalization.service import MatchService
from usopen_live.utils.cache import build_points_cache, build_scoreboard_cache
from .routes import router


def build_match_service(app_settings: AppSettings, http_client) -> MatchService:
    """Wires clients, caches and normalizer from settings; caches live as long as the service."""
    scoreboard_client = ScoreboardClient(
        http_client,
        build_scoreboard_cache(app_settings),
        base_url=app_settings.scoreboard_base_url,
        timeout=app_settings.feed_timeout_seconds,
        max_attempts=app_settings.feed_max_attempts,
        cache_buster_window=app_settings.cache_buster_window_seconds,
    )
    points_client = LivePointsClient(
        http_client,
        build_points_cache(app_settings),
        timeout=app_settings.points_timeout_seconds,
    )
    normalizer = Normalizer(
        tournament_name=app_settings.tournament_name,
        home_timezone=app_settings.home_timezone,
    )
    return MatchService(scoreboard_client, points_client, normalizer)


def create_app(
    app_settings: Optional[AppSettings] = None,
    match_service: Optional[MatchService] = None,
) -> FastAPI:
    """Builds the API. A supplied ``match_service`` is used as-is (tests)."""
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = None
        if match_service is None:
            http_client = build_http_client(app_settings.feed_timeout_seconds)
            app.state.match_service = build_match_service(app_settings, http_client)
        logger.info(
            f"API ready for '{app_settings.tournament_name}' ({app_settings.home_timezone})"
        )
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()
                logger.info("Closed upstream HTTP client")

    app = FastAPI(title="US Open Live Scores", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.match_service = match_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        allow_credentials=False,
    )
    app.include_router(router)
    return app

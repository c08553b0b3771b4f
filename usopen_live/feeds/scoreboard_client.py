import asyncio
import time
from typing import Any, Callable, Dict

import httpx
from loguru import logger

from usopen_live.models.enums import Tour
from usopen_live.utils.cache import ScoreboardCache
from usopen_live.utils.time_utils import cache_buster, to_yyyymmdd
from .base_client import BaseFeedClient, FeedError

DEFAULT_SCOREBOARD_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/tennis"

RawScoreboard = Dict[str, Any]


def empty_scoreboard() -> RawScoreboard:
    return {"events": []}


class ScoreboardClient(BaseFeedClient):
    """Fetches the per-tour, per-day scoreboard with a short-lived cache.

    Failures never reach the caller: a tour that cannot be fetched is
    reported as a scoreboard with no events and is not cached.
    """

    name = "scoreboard"

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: ScoreboardCache,
        base_url: str = DEFAULT_SCOREBOARD_BASE_URL,
        timeout: float = 4.0,
        max_attempts: int = 2,
        cache_buster_window: int = 5,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(client, timeout=timeout, max_attempts=max_attempts)
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.cache_buster_window = cache_buster_window
        self.clock = clock

    def scoreboard_url(self, tour: Tour) -> str:
        return f"{self.base_url}/{tour.value}/scoreboard"

    async def fetch_scoreboard(self, tour: Tour, date_iso: str) -> RawScoreboard:
        """Scoreboard payload for ``tour`` on ``date_iso`` (YYYY-MM-DD)."""
        yyyymmdd = to_yyyymmdd(date_iso)
        cache_key = (tour.value, yyyymmdd)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Scoreboard cache hit for {tour.value} {yyyymmdd}")
            return cached

        # Bucketed cache-buster: identical requests inside one window share a URL
        params = {
            "dates": yyyymmdd,
            "cb": cache_buster(self.cache_buster_window, self.clock()),
        }
        try:
            payload = await self._get_json(self.scoreboard_url(tour), params=params)
        except FeedError as e:
            logger.error(f"Scoreboard fetch failed for {tour.value} {yyyymmdd}: {e}")
            return empty_scoreboard()
        except Exception as e:
            logger.exception(
                f"Unexpected error fetching scoreboard for {tour.value} {yyyymmdd}: {e}"
            )
            return empty_scoreboard()

        events = payload.get("events")
        logger.info(
            f"Fetched {tour.value.upper()} scoreboard for {yyyymmdd}: "
            f"{len(events) if isinstance(events, list) else 0} event(s)"
        )
        self.cache[cache_key] = payload
        return payload

    async def fetch_all_tours(self, date_iso: str) -> Dict[Tour, RawScoreboard]:
        """Fetches every tour concurrently; each tour fails independently."""
        tours = list(Tour)
        results = await asyncio.gather(
            *(self.fetch_scoreboard(tour, date_iso) for tour in tours)
        )
        return dict(zip(tours, results))

from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx
from loguru import logger

from usopen_live.models.match import CurrentGame
from usopen_live.models.raw import PathKey, UntrustedRecord
from usopen_live.utils.cache import PointsCache
from usopen_live.utils.misc_utils import parse_points
from .base_client import BaseFeedClient, FeedError

SUMMARY_URLS = (
    "https://site.web.api.espn.com/apis/v2/sports/tennis/summary?event={event}",
    "https://site.api.espn.com/apis/site/v2/sports/tennis/summary?event={event}",
)
COMPETITION_URLS = (
    "https://sports.core.api.espn.com/v2/sports/tennis/competitions/{competition}",
    "https://sports.core.api.espn.com/v2/sports/tennis/competitions/{competition}/details",
)

# Where a two-sided competitors list is known to live, checked in order
COMPETITOR_PATHS: Tuple[Tuple[PathKey, ...], ...] = (
    ("competitors",),
    ("header", "competitions", 0, "competitors"),
    ("competitions", 0, "competitors"),
    ("situation", "competitors"),
)
POINT_FIELDS = ("point", "points", "currentPoint", "gamePoints", "tennisPoint")

MAX_SCAN_DEPTH = 4


def _point_value(competitor: UntrustedRecord) -> Any:
    for field_name in POINT_FIELDS:
        value = competitor.get(field_name)
        if value is not None:
            return value
    return None


def _points_pair(competitors: Any) -> Optional[Tuple[Any, Any]]:
    if not isinstance(competitors, list) or len(competitors) < 2:
        return None
    first = _point_value(UntrustedRecord(competitors[0]))
    second = _point_value(UntrustedRecord(competitors[1]))
    if first is None and second is None:
        return None
    return first, second


def _scan(value: Any, depth: int) -> Optional[Tuple[Any, Any]]:
    if depth > MAX_SCAN_DEPTH:
        return None
    if isinstance(value, dict):
        pair = _points_pair(value.get("competitors"))
        if pair is not None:
            return pair
        children: Sequence[Any] = list(value.values())
    elif isinstance(value, list):
        children = value
    else:
        return None
    for child in children:
        if isinstance(child, (dict, list)):
            pair = _scan(child, depth + 1)
            if pair is not None:
                return pair
    return None


def find_point_values(payload: Any) -> Optional[Tuple[Any, Any]]:
    """Raw (side A, side B) point values from a summary-like payload.

    Known competitor paths are tried first; otherwise the payload is scanned
    down to ``MAX_SCAN_DEPTH`` levels for any object holding a competitors
    list with point fields.
    """
    record = UntrustedRecord(payload)
    for path in COMPETITOR_PATHS:
        pair = _points_pair(record.get(*path))
        if pair is not None:
            return pair
    return _scan(payload, 0)


def extract_current_game(payload: Any) -> Optional[CurrentGame]:
    pair = find_point_values(payload)
    if pair is None:
        return None
    p1_points, p2_points = parse_points(pair[0]), parse_points(pair[1])
    if p1_points is None or p2_points is None:
        return None
    return CurrentGame(p1_points=p1_points, p2_points=p2_points)


class LivePointsClient(BaseFeedClient):
    """Best-effort lookup of the point score in the game being played."""

    name = "live-points"

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: PointsCache,
        timeout: float = 4.0,
    ):
        super().__init__(client, timeout=timeout, max_attempts=1)
        self.cache = cache

    @staticmethod
    def candidate_urls(match_id: str, competition_id: Optional[str] = None) -> List[str]:
        urls = []
        if match_id:
            urls.extend(url.format(event=quote(match_id, safe="")) for url in SUMMARY_URLS)
        if competition_id:
            urls.extend(
                url.format(competition=quote(competition_id, safe=""))
                for url in COMPETITION_URLS
            )
        return urls

    async def fetch_current_game_points(
        self, match_id: str, competition_id: Optional[str] = None
    ) -> Optional[CurrentGame]:
        """Current game points for a live match, or None when no endpoint has them."""
        cache_key = (match_id, competition_id or "")
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        for url in self.candidate_urls(match_id, competition_id):
            try:
                payload = await self._get_json(url)
            except FeedError as e:
                logger.debug(f"Live points candidate failed for {match_id}: {e}")
                continue
            except Exception as e:
                logger.warning(
                    f"Unexpected error fetching live points for {match_id} from {url}: {e!r}"
                )
                continue

            current_game = extract_current_game(payload)
            if current_game is not None:
                logger.debug(
                    f"Live points for {match_id}: {current_game.p1_points}-{current_game.p2_points}"
                )
                self.cache[cache_key] = current_game
                return current_game

        logger.debug(f"No live points found for {match_id}")
        return None

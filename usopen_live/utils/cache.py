# usopen_live/utils/cache.py
from cachetools import TTLCache

from usopen_live.config.settings import AppSettings

# (tour, yyyymmdd) -> decoded scoreboard payload
ScoreboardCache = TTLCache
# (match id, competition id) -> CurrentGame
PointsCache = TTLCache


def build_scoreboard_cache(app_settings: AppSettings) -> ScoreboardCache:
    """LRU cache of scoreboard responses, short-lived so live scores stay fresh."""
    return TTLCache(
        maxsize=app_settings.scoreboard_cache_max_entries,
        ttl=app_settings.scoreboard_cache_ttl_seconds,
    )


def build_points_cache(app_settings: AppSettings) -> PointsCache:
    return TTLCache(
        maxsize=app_settings.points_cache_max_entries,
        ttl=app_settings.points_cache_ttl_seconds,
    )

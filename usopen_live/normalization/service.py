import asyncio
from typing import List, Optional

from loguru import logger

from usopen_live.feeds.points_client import LivePointsClient
from usopen_live.feeds.scoreboard_client import ScoreboardClient
from usopen_live.models.enums import Gender, MatchStatus
from usopen_live.models.match import GroupedMatches, NormalizationReport, NormalizedMatch
from .normalizer import Normalizer


class MatchService:
    """Fetches, normalizes and enriches a day's singles matches for one gender."""

    def __init__(
        self,
        scoreboard_client: ScoreboardClient,
        points_client: Optional[LivePointsClient],
        normalizer: Normalizer,
    ):
        self.scoreboard_client = scoreboard_client
        self.points_client = points_client
        self.normalizer = normalizer
        self.last_report: Optional[NormalizationReport] = None

    async def get_matches_by_date(self, gender: Gender, date_iso: str) -> GroupedMatches:
        scoreboards = await self.scoreboard_client.fetch_all_tours(date_iso)
        matches, report = self.normalizer.normalize(
            scoreboards.values(), gender, date_iso
        )
        self.last_report = report
        logger.info(f"Normalized {gender.value} {date_iso}: {report.summary()}")
        if report.delayed_folded:
            logger.info(
                f"{report.delayed_folded} delayed/unrecognized match(es) shown as upcoming"
            )

        matches = await self.enrich_live(matches)
        return self.normalizer.partition(matches)

    async def enrich_live(self, matches: List[NormalizedMatch]) -> List[NormalizedMatch]:
        """Attaches current game points to live matches, best effort and in parallel."""
        if self.points_client is None:
            return matches
        live_indexes = [i for i, m in enumerate(matches) if m.status is MatchStatus.LIVE]
        if not live_indexes:
            return matches

        results = await asyncio.gather(
            *(
                self.points_client.fetch_current_game_points(
                    matches[i].id, matches[i].id
                )
                for i in live_indexes
            ),
            return_exceptions=True,
        )
        enriched = list(matches)
        for i, result in zip(live_indexes, results):
            if isinstance(result, Exception):
                logger.warning(f"Live points enrichment failed for {matches[i].id}: {result!r}")
            elif result is not None:
                enriched[i] = matches[i].with_current_game(result)
        return enriched

import uuid
from datetime import datetime, timezone
from typing import Iterable, List, NamedTuple, Optional, Tuple

from loguru import logger

from usopen_live.models.enums import FeedStatus, Gender, MatchStatus
from usopen_live.models.match import (
    GroupedMatches,
    NormalizationReport,
    NormalizedMatch,
    Player,
    SkippedRecord,
)
from usopen_live.models.raw import UntrustedRecord
from usopen_live.utils.misc_utils import coerce_seed, parse_number, to_flag_emoji
from usopen_live.utils.time_utils import (
    DEFAULT_HOME_TIMEZONE,
    convert_utc_to_home,
    get_zone,
    is_same_home_day,
)

DEFAULT_TOURNAMENT_NAME = "us open"
ROUND_PLACEHOLDER = "Round"
COURT_PLACEHOLDER = "Court TBD"
PLAYER_PLACEHOLDER = "TBD"


class NormalizationError(Exception):
    """Custom exception for data normalization errors."""

    pass


class NormalizationOutcome(NamedTuple):
    """Either a normalized match or the reason the record was skipped."""

    match: Optional[NormalizedMatch]
    skipped: Optional[SkippedRecord] = None


class Normalizer:
    """Maps raw scoreboard payloads into NormalizedMatch objects.

    The normalizer is pure: it never performs I/O and every call builds new
    match objects, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        tournament_name: str = DEFAULT_TOURNAMENT_NAME,
        home_timezone: str = DEFAULT_HOME_TIMEZONE,
    ):
        self.tournament_name = tournament_name.lower()
        self.home_zone = get_zone(home_timezone)
        logger.debug(
            f"Normalizer initialized for '{self.tournament_name}' in {home_timezone}."
        )

    # --- Event level ---

    @staticmethod
    def merge_events(
        scoreboards: Iterable[dict],
    ) -> Tuple[List[UntrustedRecord], int]:
        """Merges the event lists of several scoreboards, deduplicating by uid/id.

        The last event seen for a key wins, keeping the position of the first.
        Returns the unique events and the number of duplicates dropped.
        """
        unique = {}
        total = 0
        for index, scoreboard in enumerate(scoreboards):
            for position, event in enumerate(UntrustedRecord(scoreboard).records("events")):
                total += 1
                key = event.first_text(("uid",), ("id",))
                unique[key if key is not None else f"anonymous:{index}:{position}"] = event
        return list(unique.values()), total - len(unique)

    def is_tournament_event(self, event: UntrustedRecord) -> bool:
        for path in (("name",), ("shortName",), ("league", "name")):
            value = event.get(*path)
            if isinstance(value, str) and self.tournament_name in value.lower():
                return True
        return False

    @staticmethod
    def singles_groupings(
        event: UntrustedRecord, gender: Gender
    ) -> List[UntrustedRecord]:
        slug = gender.singles_slug
        return [
            grouping
            for grouping in event.records("groupings")
            if (grouping.text("grouping", "slug") or "").lower() == slug
        ]

    @staticmethod
    def competition_start(
        event: UntrustedRecord, competition: UntrustedRecord
    ) -> Optional[str]:
        return competition.text("startDate") or competition.text("date") or event.text("date")

    # --- Competition level ---

    @staticmethod
    def extract_round(competition: UntrustedRecord) -> str:
        return (
            competition.first_text(
                ("round", "displayName"),
                ("round", "name"),
                ("status", "type", "description"),
                ("status", "type", "detail"),
            )
            or ROUND_PLACEHOLDER
        )

    @staticmethod
    def extract_court(competition: UntrustedRecord) -> str:
        return (
            competition.first_text(("venue", "fullName"), ("venue", "shortName"))
            or COURT_PLACEHOLDER
        )

    @staticmethod
    def extract_country(competitor: UntrustedRecord) -> str:
        return (
            competitor.first_text(
                ("athlete", "flag", "alt"),
                ("athlete", "country", "code"),
                ("team", "locationCode"),
            )
            or ""
        )

    @classmethod
    def extract_player(cls, competitor: UntrustedRecord) -> Player:
        name = (
            competitor.first_text(
                ("athlete", "displayName"),
                ("team", "displayName"),
                ("displayName",),
            )
            or PLAYER_PLACEHOLDER
        )
        seed = coerce_seed(
            competitor.first_present(("seed",), ("athlete", "seed"), ("team", "seed"))
        )
        country_code = cls.extract_country(competitor)
        return Player(
            name=name,
            seed=seed,
            country_code=country_code,
            flag_emoji=to_flag_emoji(country_code),
        )

    @staticmethod
    def extract_sets(
        first: UntrustedRecord, second: UntrustedRecord
    ) -> List[Tuple[int, int]]:
        lines_a = first.records("linescores")
        lines_b = second.records("linescores")
        sets = []
        for i in range(max(len(lines_a), len(lines_b))):
            raw_a = lines_a[i].get("value") if i < len(lines_a) else None
            raw_b = lines_b[i].get("value") if i < len(lines_b) else None
            score_a = parse_number(0 if raw_a in (None, "") else raw_a)
            score_b = parse_number(0 if raw_b in (None, "") else raw_b)
            if score_a is None and score_b is None:
                continue
            sets.append((int(score_a or 0), int(score_b or 0)))
        return sets

    def start_time(self, start_iso: Optional[str]) -> datetime:
        if start_iso:
            try:
                return convert_utc_to_home(start_iso, self.home_zone)
            except ValueError:
                logger.warning(f"Unparseable start time {start_iso!r}; using now.")
        return datetime.now(timezone.utc).astimezone(self.home_zone)

    def normalize_competition(
        self, event: UntrustedRecord, competition: UntrustedRecord
    ) -> NormalizedMatch:
        """Builds the UI match for one competition; raises NormalizationError."""
        feed_status = FeedStatus.from_feed(competition.get("status", "type", "name"))
        competitors = competition.records("competitors")
        first = competitors[0] if len(competitors) > 0 else UntrustedRecord()
        second = competitors[1] if len(competitors) > 1 else UntrustedRecord()

        match_id = competition.text("id") or event.first_text(("uid",), ("id",))
        try:
            return NormalizedMatch(
                id=match_id or uuid.uuid4().hex,
                round=self.extract_round(competition),
                court=self.extract_court(competition),
                start_time=self.start_time(self.competition_start(event, competition)),
                status=MatchStatus.from_feed_status(feed_status),
                players=(self.extract_player(first), self.extract_player(second)),
                sets=self.extract_sets(first, second),
            )
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"Invalid competition {match_id}: {e}") from e

    def try_normalize(
        self, event: UntrustedRecord, competition: UntrustedRecord
    ) -> NormalizationOutcome:
        competition_id = competition.text("id")
        try:
            return NormalizationOutcome(self.normalize_competition(event, competition))
        except NormalizationError as e:
            reason = str(e)
        except Exception as e:
            reason = f"unexpected {type(e).__name__}: {e}"
        logger.warning(f"Skipping competition {competition_id}: {reason}")
        return NormalizationOutcome(
            None, SkippedRecord(competition_id=competition_id, reason=reason)
        )

    # --- Batch ---

    def normalize(
        self, scoreboards: Iterable[dict], gender: Gender, date_iso: str
    ) -> Tuple[List[NormalizedMatch], NormalizationReport]:
        """Normalizes every singles competition of the tournament played on ``date_iso``."""
        report = NormalizationReport()
        events, report.duplicate_events = self.merge_events(scoreboards)
        report.events_seen = len(events) + report.duplicate_events

        matches: List[NormalizedMatch] = []
        seen_competitions = set()
        for event in events:
            if not self.is_tournament_event(event):
                continue
            report.tournament_events += 1
            for grouping in self.singles_groupings(event, gender):
                for competition in grouping.records("competitions"):
                    report.competitions_seen += 1
                    start_iso = self.competition_start(event, competition)
                    if not is_same_home_day(start_iso, date_iso, self.home_zone):
                        report.off_day += 1
                        continue
                    competition_id = competition.text("id")
                    if competition_id and competition_id in seen_competitions:
                        report.duplicate_competitions += 1
                        continue

                    outcome = self.try_normalize(event, competition)
                    if outcome.match is not None:
                        matches.append(outcome.match)
                        if FeedStatus.from_feed(
                            competition.get("status", "type", "name")
                        ) is FeedStatus.DELAYED:
                            report.delayed_folded += 1
                    else:
                        report.skipped.append(outcome.skipped)
                    if competition_id:
                        seen_competitions.add(competition_id)

        report.normalized = len(matches)
        return matches, report

    @staticmethod
    def partition(matches: Iterable[NormalizedMatch]) -> GroupedMatches:
        """Splits matches into display buckets.

        Live and upcoming matches run earliest first; completed matches run
        most recently started first.
        """
        grouped = GroupedMatches()
        for match in matches:
            if match.status is MatchStatus.LIVE:
                grouped.live.append(match)
            elif match.status is MatchStatus.COMPLETED:
                grouped.completed.append(match)
            else:
                grouped.upcoming.append(match)
        grouped.live.sort(key=lambda m: m.start_time)
        grouped.upcoming.sort(key=lambda m: m.start_time)
        grouped.completed.sort(key=lambda m: m.start_time, reverse=True)
        return grouped

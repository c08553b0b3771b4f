from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .enums import MatchStatus


class Player(BaseModel):
    """One side of a singles match."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    seed: Optional[int] = None
    country_code: str = Field("", alias="countryCode")
    flag_emoji: str = Field("", alias="flagEmoji")


class CurrentGame(BaseModel):
    """Point score of the game in progress (50 encodes advantage)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    p1_points: int = Field(..., alias="p1Points")
    p2_points: int = Field(..., alias="p2Points")


class NormalizedMatch(BaseModel):
    """A match in the shape the scoreboard UI consumes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    round: str
    court: str
    start_time: datetime = Field(..., alias="startTime")  # Home-timezone aware
    status: MatchStatus
    players: Tuple[Player, Player]
    sets: List[Tuple[int, int]] = []
    current_game: Optional[CurrentGame] = Field(None, alias="currentGame")

    @field_serializer("start_time")
    def _serialize_start_time(self, value: datetime) -> str:
        return value.isoformat(timespec="milliseconds")

    def with_current_game(self, current_game: CurrentGame) -> "NormalizedMatch":
        """Copy of this match carrying live point enrichment."""
        return self.model_copy(update={"current_game": current_game})

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GroupedMatches(BaseModel):
    live: List[NormalizedMatch] = []
    upcoming: List[NormalizedMatch] = []
    completed: List[NormalizedMatch] = []

    def to_api(self) -> dict:
        return {
            "live": [m.to_api() for m in self.live],
            "upcoming": [m.to_api() for m in self.upcoming],
            "completed": [m.to_api() for m in self.completed],
        }


class SkippedRecord(BaseModel):
    """A competition the normalizer dropped, and why."""

    competition_id: Optional[str] = None
    reason: str


class NormalizationReport(BaseModel):
    """Counters describing one normalization pass."""

    events_seen: int = 0
    duplicate_events: int = 0
    tournament_events: int = 0
    competitions_seen: int = 0
    off_day: int = 0
    duplicate_competitions: int = 0
    normalized: int = 0
    delayed_folded: int = 0
    skipped: List[SkippedRecord] = []

    def summary(self) -> str:
        return (
            f"events={self.events_seen} (dupes={self.duplicate_events}, "
            f"tournament={self.tournament_events}) "
            f"competitions={self.competitions_seen} off_day={self.off_day} "
            f"dupes={self.duplicate_competitions} normalized={self.normalized} "
            f"delayed_as_upcoming={self.delayed_folded} skipped={len(self.skipped)}"
        )

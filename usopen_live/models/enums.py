from enum import Enum


class Tour(str, Enum):
    ATP = "atp"
    WTA = "wta"


class Gender(str, Enum):
    MEN = "men"
    WOMEN = "women"

    @property
    def singles_slug(self) -> str:
        """Grouping slug of this gender's singles draw in the scoreboard feed."""
        return "mens-singles" if self is Gender.MEN else "womens-singles"


class FeedStatus(str, Enum):
    """Match status as reported by the upstream feed."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"
    DELAYED = "delayed"  # Also covers every status name we do not recognize

    @classmethod
    def from_feed(cls, raw_name: object) -> "FeedStatus":
        name = raw_name.upper() if isinstance(raw_name, str) else ""
        return _FEED_STATUS_NAMES.get(name, cls.DELAYED)


_FEED_STATUS_NAMES = {
    "STATUS_SCHEDULED": FeedStatus.SCHEDULED,
    "STATUS_IN_PROGRESS": FeedStatus.IN_PROGRESS,
    "STATUS_FINAL": FeedStatus.FINAL,
}


class MatchStatus(str, Enum):
    """Display bucket of a normalized match."""

    LIVE = "live"
    UPCOMING = "upcoming"
    COMPLETED = "completed"

    @classmethod
    def from_feed_status(cls, status: FeedStatus) -> "MatchStatus":
        if status is FeedStatus.IN_PROGRESS:
            return cls.LIVE
        if status is FeedStatus.FINAL:
            return cls.COMPLETED
        return cls.UPCOMING

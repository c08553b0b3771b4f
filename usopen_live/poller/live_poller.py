import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
from loguru import logger
from rich.console import Group
from rich.table import Table

from usopen_live.utils.time_utils import (
    DEFAULT_HOME_TIMEZONE,
    convert_utc_to_home,
    format_time_for_display,
    is_today,
    points_display,
)

# Fields of a live match that a poll is allowed to replace
LIVE_SCORE_FIELDS = ("sets", "currentGame", "round", "court", "startTime")

MatchPayload = Dict[str, Any]


def merge_live_updates(
    previous: Optional[MatchPayload], current: MatchPayload
) -> MatchPayload:
    """Folds a fresh payload into the displayed one without replacing live matches wholesale.

    Live matches already on screen keep their other fields and only take the
    score-bearing ones from ``current``; ``currentGame`` disappears when the
    new payload has none. Upcoming and completed lists are taken as-is.
    """
    if previous is None:
        return current
    by_id = {m.get("id"): m for m in previous.get("live", [])}
    merged_live: List[MatchPayload] = []
    for match in current.get("live", []):
        old = by_id.get(match.get("id"))
        if old is None:
            merged_live.append(match)
            continue
        updated = {k: v for k, v in old.items() if k not in LIVE_SCORE_FIELDS}
        for field_name in LIVE_SCORE_FIELDS:
            if field_name in match:
                updated[field_name] = match[field_name]
        merged_live.append(updated)
    return {
        "date": current.get("date"),
        "gender": current.get("gender"),
        "live": merged_live,
        "upcoming": current.get("upcoming", []),
        "completed": current.get("completed", []),
        "lastUpdated": current.get("lastUpdated"),
    }


class LivePoller:
    """Terminal counterpart of the scoreboard page: loads once, then polls while the day is today."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        gender: str,
        date_iso: str,
        interval: float = 5.0,
        home_timezone: str = DEFAULT_HOME_TIMEZONE,
        on_update: Optional[Callable[[MatchPayload], None]] = None,
    ):
        self.client = client
        self.url = f"{base_url.rstrip('/')}/{gender}/{date_iso}"
        self.date_iso = date_iso
        self.interval = interval
        self.home_timezone = home_timezone
        self.on_update = on_update
        self.state: Optional[MatchPayload] = None

    async def load(self) -> MatchPayload:
        """Initial fetch; errors propagate so the caller can show them."""
        response = await self.client.get(self.url)
        payload = response.json()
        if not isinstance(payload, dict):
            raise RuntimeError(f"Unexpected response body from {self.url}")
        if not response.is_success:
            raise RuntimeError(payload.get("error", f"HTTP {response.status_code}"))
        self.state = payload
        self._notify()
        return payload

    async def poll_once(self) -> bool:
        """One silent poll; returns False when it was ignored."""
        try:
            response = await self.client.get(self.url)
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Poll of {self.url} failed: {e!r}")
            return False
        if not response.is_success:
            logger.debug(f"Poll of {self.url} returned {response.status_code}")
            return False
        if not isinstance(payload, dict):
            logger.debug(f"Poll of {self.url} returned a non-object body")
            return False
        self.state = merge_live_updates(self.state, payload)
        self._notify()
        return True

    def should_poll(self) -> bool:
        return is_today(self.date_iso, self.home_timezone)

    async def run(self, max_polls: Optional[int] = None) -> Optional[MatchPayload]:
        await self.load()
        polls = 0
        while self.should_poll() and (max_polls is None or polls < max_polls):
            await asyncio.sleep(self.interval)
            await self.poll_once()
            polls += 1
        return self.state

    def _notify(self) -> None:
        if self.on_update is not None and self.state is not None:
            self.on_update(self.state)


def _player_label(player: MatchPayload) -> str:
    seed = f" [{player['seed']}]" if player.get("seed") else ""
    flag = f"{player['flagEmoji']} " if player.get("flagEmoji") else ""
    return f"{flag}{player.get('name', 'TBD')}{seed}"


def _score_cell(match: MatchPayload, side: int) -> str:
    games = "  ".join(str(pair[side]) for pair in match.get("sets", []))
    current = match.get("currentGame")
    if current:
        points = current["p1Points"] if side == 0 else current["p2Points"]
        games = f"{games}  ({points_display(points)})"
    return games


def render_matches(
    payload: MatchPayload, home_timezone: str = DEFAULT_HOME_TIMEZONE
) -> Group:
    """Rich tables for the live, upcoming and completed buckets."""
    tables = []
    for bucket, title in (("live", "Live"), ("upcoming", "Upcoming"), ("completed", "Completed")):
        table = Table(title=f"{title} ({len(payload.get(bucket, []))})", expand=True)
        table.add_column("Time", no_wrap=True)
        table.add_column("Round")
        table.add_column("Court")
        table.add_column("Players")
        table.add_column("Score", no_wrap=True)
        for match in payload.get(bucket, []):
            try:
                start = format_time_for_display(
                    convert_utc_to_home(match["startTime"], home_timezone)
                )
            except (KeyError, ValueError):
                start = "--"
            players = match.get("players", [{}, {}])
            table.add_row(
                start,
                match.get("round", ""),
                match.get("court", ""),
                f"{_player_label(players[0])}\n{_player_label(players[1])}",
                f"{_score_cell(match, 0)}\n{_score_cell(match, 1)}",
            )
        tables.append(table)
    return Group(*tables)

"""Pytest configuration and shared fixtures."""

import json
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from usopen_live.config.settings import AppSettings
from usopen_live.feeds.base_client import build_http_client

MATCH_DAY = "2025-08-30"


def competitor(
    name: Optional[str] = "Player",
    seed=None,
    country: Optional[str] = None,
    sets: Optional[List] = None,
    **extra,
) -> dict:
    """A competitor block shaped like the tennis scoreboard feed's."""
    athlete: Dict = {}
    if name is not None:
        athlete["displayName"] = name
    if country is not None:
        athlete["flag"] = {"alt": country}
    data: Dict = {"athlete": athlete} if athlete else {}
    if seed is not None:
        data["seed"] = seed
    if sets is not None:
        data["linescores"] = [{"value": v} for v in sets]
    data.update(extra)
    return data


def competition(
    comp_id: str,
    start: str = f"{MATCH_DAY}T15:00Z",
    status: str = "STATUS_SCHEDULED",
    players: Optional[List[dict]] = None,
    round_name: Optional[str] = "Round 3",
    court: Optional[str] = "Arthur Ashe Stadium",
) -> dict:
    data: Dict = {
        "id": comp_id,
        "startDate": start,
        "status": {"type": {"name": status, "description": status.title()}},
        "competitors": players
        if players is not None
        else [competitor("Player A"), competitor("Player B")],
    }
    if round_name is not None:
        data["round"] = {"displayName": round_name}
    if court is not None:
        data["venue"] = {"fullName": court}
    return data


def event(
    event_id: str = "172-2025",
    name: str = "US Open",
    men: Optional[List[dict]] = None,
    women: Optional[List[dict]] = None,
    uid: Optional[str] = None,
) -> dict:
    groupings = []
    if men is not None:
        groupings.append({"grouping": {"slug": "mens-singles"}, "competitions": men})
    if women is not None:
        groupings.append({"grouping": {"slug": "womens-singles"}, "competitions": women})
    data = {"id": event_id, "name": name, "date": f"{MATCH_DAY}T15:00Z", "groupings": groupings}
    if uid is not None:
        data["uid"] = uid
    return data


def scoreboard(*events: dict) -> dict:
    return {"events": list(events)}


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def test_settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        feed_max_attempts=1,
        cors_origins=["http://testserver"],
    )


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an AsyncClient whose requests are answered by ``handler``."""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return build_http_client(transport=httpx.MockTransport(handler))

    return _build

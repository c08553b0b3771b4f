"""Tests for usopen_live.poller.live_poller."""

from unittest.mock import patch

import httpx
import pytest
from rich.console import Console

from conftest import MATCH_DAY, json_response
from usopen_live.poller.live_poller import LivePoller, merge_live_updates, render_matches


def _live(match_id, sets, current=None, **extra):
    match = {
        "id": match_id,
        "round": "Round 3",
        "court": "Arthur Ashe Stadium",
        "startTime": "2025-08-30T11:00:00.000-04:00",
        "status": "live",
        "players": [
            {"name": "A", "countryCode": "US", "flagEmoji": ""},
            {"name": "B", "seed": 3, "countryCode": "", "flagEmoji": ""},
        ],
        "sets": sets,
    }
    if current is not None:
        match["currentGame"] = current
    match.update(extra)
    return match


def _payload(live, upcoming=(), completed=(), stamp="t1"):
    return {
        "date": MATCH_DAY,
        "gender": "men",
        "live": list(live),
        "upcoming": list(upcoming),
        "completed": list(completed),
        "lastUpdated": stamp,
    }


class TestMergeLiveUpdates:
    def test_first_payload_is_taken_whole(self):
        fresh = _payload([_live("1", [[1, 0]])])
        assert merge_live_updates(None, fresh) is fresh

    def test_only_score_fields_replace_existing_live_match(self):
        previous = _payload([_live("1", [[1, 0]], note="pinned")])
        current = _payload(
            [_live("1", [[2, 0]], current={"p1Points": 15, "p2Points": 0}, court="Court 5")],
            stamp="t2",
        )
        current["live"][0]["players"][0]["name"] = "Renamed"

        merged = merge_live_updates(previous, current)

        match = merged["live"][0]
        assert match["sets"] == [[2, 0]]
        assert match["currentGame"] == {"p1Points": 15, "p2Points": 0}
        assert match["court"] == "Court 5"
        assert match["note"] == "pinned"
        assert match["players"][0]["name"] == "A"
        assert merged["lastUpdated"] == "t2"

    def test_current_game_cleared_when_absent(self):
        previous = _payload([_live("1", [[1, 0]], current={"p1Points": 40, "p2Points": 40})])
        merged = merge_live_updates(previous, _payload([_live("1", [[2, 0]])]))
        assert "currentGame" not in merged["live"][0]

    def test_new_live_matches_and_other_buckets_come_from_current(self):
        previous = _payload([_live("1", [])], upcoming=[{"id": "old"}])
        current = _payload([_live("2", [])], upcoming=[{"id": "new"}], completed=[{"id": "1"}])
        merged = merge_live_updates(previous, current)
        assert [m["id"] for m in merged["live"]] == ["2"]
        assert merged["upcoming"] == [{"id": "new"}]
        assert merged["completed"] == [{"id": "1"}]


def _poller(handler, updates=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, LivePoller(
        client,
        "http://api.test/",
        "men",
        MATCH_DAY,
        interval=0,
        on_update=(updates.append if updates is not None else None),
    )


@pytest.mark.asyncio
async def test_polls_while_today_and_ignores_failures():
    responses = [
        json_response(_payload([_live("1", [[1, 0]])])),
        json_response({"error": "boom"}, status_code=500),
        json_response(_payload([_live("1", [[2, 0]])], stamp="t3")),
    ]
    seen_urls = []

    def handler(request):
        seen_urls.append(str(request.url))
        return responses.pop(0)

    updates = []
    client, poller = _poller(handler, updates)
    async with client:
        with patch.object(LivePoller, "should_poll", return_value=True):
            state = await poller.run(max_polls=2)

    assert seen_urls[0] == f"http://api.test/men/{MATCH_DAY}"
    assert state["live"][0]["sets"] == [[2, 0]]
    assert state["lastUpdated"] == "t3"
    assert len(updates) == 2  # initial load plus the successful poll


@pytest.mark.asyncio
async def test_past_day_loads_once():
    calls = []

    def handler(request):
        calls.append(request)
        return json_response(_payload([]))

    client, poller = _poller(handler)
    async with client:
        with patch.object(LivePoller, "should_poll", return_value=False):
            await poller.run()

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_initial_load_error_is_raised():
    def handler(request):
        return json_response({"error": 'Gender must be "men" or "women"'}, status_code=400)

    client, poller = _poller(handler)
    async with client:
        with pytest.raises(RuntimeError, match="Gender must be"):
            await poller.load()


def test_render_matches_shows_points_and_seeds():
    payload = _payload([_live("1", [[6, 4], [2, 1]], current={"p1Points": 50, "p2Points": 40})])
    console = Console(record=True, width=160)
    console.print(render_matches(payload))
    text = console.export_text()
    assert "Live (1)" in text
    assert "Upcoming (0)" in text
    assert "11:00 AM" in text
    assert "B [3]" in text
    assert "(AD)" in text


@pytest.mark.asyncio
async def test_non_object_poll_body_keeps_previous_state():
    responses = [
        json_response(_payload([_live("1", [[1, 0]])])),
        json_response(["unexpected"]),
    ]

    client, poller = _poller(lambda request: responses.pop(0))
    async with client:
        with patch.object(LivePoller, "should_poll", return_value=True):
            state = await poller.run(max_polls=1)

    assert state["live"][0]["sets"] == [[1, 0]]


@pytest.mark.asyncio
async def test_initial_load_rejects_non_object_body():
    client, poller = _poller(lambda request: json_response(["unexpected"]))
    async with client:
        with pytest.raises(RuntimeError, match="Unexpected response body"):
            await poller.load()

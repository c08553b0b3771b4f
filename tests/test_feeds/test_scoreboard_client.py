"""Tests for usopen_live.feeds.scoreboard_client."""

import httpx
import pytest

from conftest import MATCH_DAY, event, json_response, scoreboard
from usopen_live.feeds.scoreboard_client import ScoreboardClient
from usopen_live.models.enums import Tour
from usopen_live.utils.cache import build_scoreboard_cache


def _client(http_client, test_settings, **kwargs):
    params = {"max_attempts": 1, "clock": lambda: 1_000.0}
    params.update(kwargs)
    return ScoreboardClient(http_client, build_scoreboard_cache(test_settings), **params)


@pytest.mark.asyncio
async def test_request_shape_and_cache(mock_http_client, test_settings):
    requests = []
    payload = scoreboard(event("1", men=[]))

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return json_response(payload)

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        first = await client.fetch_scoreboard(Tour.ATP, MATCH_DAY)
        second = await client.fetch_scoreboard(Tour.ATP, MATCH_DAY)

    assert first == payload and second == payload
    assert len(requests) == 1
    request = requests[0]
    assert request.url.path.endswith("/tennis/atp/scoreboard")
    assert request.url.params["dates"] == "20250830"
    assert request.url.params["cb"] == "200"
    assert request.headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_tours_and_days_are_cached_separately(mock_http_client, test_settings):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.url.path, request.url.params["dates"]))
        return json_response(scoreboard())

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        await client.fetch_scoreboard(Tour.ATP, MATCH_DAY)
        await client.fetch_scoreboard(Tour.WTA, MATCH_DAY)
        await client.fetch_scoreboard(Tour.ATP, "2025-08-31")

    assert len(calls) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 500])
async def test_non_2xx_fails_soft_and_is_not_cached(mock_http_client, test_settings, status):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return json_response({"error": "nope"}, status_code=status)

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        assert await client.fetch_scoreboard(Tour.WTA, MATCH_DAY) == {"events": []}
        assert await client.fetch_scoreboard(Tour.WTA, MATCH_DAY) == {"events": []}

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_timeout_fails_soft(mock_http_client, test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        assert await client.fetch_scoreboard(Tour.ATP, MATCH_DAY) == {"events": []}


@pytest.mark.asyncio
async def test_transient_failure_is_retried(mock_http_client, test_settings):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            return json_response({}, status_code=503)
        return json_response(scoreboard(event("1")))

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings, max_attempts=2)
        client.backoff_multiplier = 0
        result = await client.fetch_scoreboard(Tour.ATP, MATCH_DAY)

    assert len(attempts) == 2
    assert result["events"][0]["id"] == "1"


@pytest.mark.asyncio
async def test_non_object_body_fails_soft(mock_http_client, test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        assert await client.fetch_scoreboard(Tour.ATP, MATCH_DAY) == {"events": []}


@pytest.mark.asyncio
async def test_fetch_all_tours_isolates_failures(mock_http_client, test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if "/wta/" in request.url.path:
            return json_response({}, status_code=502)
        return json_response(scoreboard(event("atp-event")))

    async with mock_http_client(handler) as http_client:
        client = _client(http_client, test_settings)
        boards = await client.fetch_all_tours(MATCH_DAY)

    assert boards[Tour.ATP]["events"][0]["id"] == "atp-event"
    assert boards[Tour.WTA] == {"events": []}

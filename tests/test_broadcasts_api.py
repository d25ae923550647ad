"""Tests for services.youtube.api.broadcasts: Data API v3 client over httpx."""

from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from core.errors import RemoteTransitionFailure
from services.youtube.api.broadcasts import YouTubeBroadcastAPI
from services.youtube.api.errors import YouTubeAPIError
from services.youtube.auth import CredentialsProvider, StaticTokenProvider, YouTubeAuthError
from shared.broadcasts.models import BroadcastLifecycle, StreamHealth

from .conftest import at


def _api(handler: Callable[[httpx.Request], httpx.Response]) -> YouTubeBroadcastAPI:
    return YouTubeBroadcastAPI(
        credentials=StaticTokenProvider("token-123"),
        base_url="https://yt.test/youtube/v3",
        page_size=2,
        transport=httpx.MockTransport(handler),
    )


def _broadcast_item(broadcast_id: str, status: str, **snippet) -> dict:
    return {
        "id": broadcast_id,
        "snippet": {"title": f"Title {broadcast_id}", **snippet},
        "status": {"lifeCycleStatus": status},
        "contentDetails": {"boundStreamId": f"stream-{broadcast_id}"},
    }


def _error(status: int, message: str, reason: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={"error": {"code": status, "message": message, "errors": [{"reason": reason}]}},
    )


class TestListBroadcasts:
    @pytest.mark.asyncio
    async def test_follows_pages_and_normalizes(self) -> None:
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.params.get("pageToken") == "p2":
                return httpx.Response(
                    200,
                    json={"items": [_broadcast_item("c", "complete")]},
                )
            return httpx.Response(
                200,
                json={
                    "items": [
                        _broadcast_item("a", "ready", scheduledStartTime="2026-10-18T09:00:00Z"),
                        _broadcast_item("b", "liveStarting", actualStartTime="2026-10-18T10:30:00Z"),
                    ],
                    "nextPageToken": "p2",
                },
            )

        broadcasts = await _api(handler).list_broadcasts()

        assert [b.id for b in broadcasts] == ["a", "b", "c"]
        assert broadcasts[0].scheduled_start_time == at(9)
        assert broadcasts[1].status is BroadcastLifecycle.LIVE
        assert broadcasts[1].actual_start_time == at(10, 30)
        assert broadcasts[2].bound_stream_id == "stream-c"

        first = requests[0]
        assert first.url.path == "/youtube/v3/liveBroadcasts"
        assert first.url.params["mine"] == "true"
        assert first.url.params["broadcastType"] == "all"
        assert first.url.params["maxResults"] == "2"
        assert first.headers["Authorization"] == "Bearer token-123"
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_unknown_lifecycle_is_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"items": [_broadcast_item("a", "mystery"), _broadcast_item("b", "testing")]},
            )

        broadcasts = await _api(handler).list_broadcasts()
        assert [b.id for b in broadcasts] == ["b"]

    @pytest.mark.asyncio
    async def test_http_error_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(403, "Quota exceeded", "quotaExceeded")

        with pytest.raises(YouTubeAPIError) as exc:
            await _api(handler).list_broadcasts()
        assert exc.value.status_code == 403
        assert exc.value.reason == "Quota exceeded (quotaExceeded)"

    @pytest.mark.asyncio
    async def test_transport_error_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(YouTubeAPIError, match="request error"):
            await _api(handler).list_broadcasts()


class TestStatusesAndStreams:
    @pytest.mark.asyncio
    async def test_statuses_for_known_ids(self) -> None:
        seen_ids: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen_ids.append(request.url.params["id"])
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": "a",
                            "status": {"lifeCycleStatus": "testing"},
                            "snippet": {"actualStartTime": "2026-10-18T09:00:00Z"},
                        }
                    ]
                },
            )

        updates = await _api(handler).list_broadcast_statuses(["a", "b", "a"])

        assert seen_ids == ["a,b"]
        assert updates[0].status is BroadcastLifecycle.TESTING
        assert updates[0].actual_start_time == at(9)

    @pytest.mark.asyncio
    async def test_stream_ids_are_chunked_by_fifty(self) -> None:
        calls: List[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            ids = request.url.params["id"].split(",")
            calls.append(len(ids))
            return httpx.Response(
                200,
                json={
                    "items": [
                        {"id": i, "status": {"healthStatus": {"status": "good"}}} for i in ids
                    ]
                },
            )

        streams = await _api(handler).list_streams([f"s{i}" for i in range(120)])

        assert calls == [50, 50, 20]
        assert len(streams) == 120
        assert all(s.health is StreamHealth.GOOD for s in streams)

    @pytest.mark.asyncio
    async def test_missing_health_is_no_data(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": [{"id": "s1", "status": {}}]})

        streams = await _api(handler).list_streams(["s1"])
        assert streams[0].health is StreamHealth.NO_DATA


class TestTransition:
    @pytest.mark.asyncio
    async def test_posts_transition(self) -> None:
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "a", "status": {"lifeCycleStatus": "testing"}})

        await _api(handler).transition("a", BroadcastLifecycle.TESTING)

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/youtube/v3/liveBroadcasts/transition"
        assert request.url.params["broadcastStatus"] == "testing"
        assert request.url.params["id"] == "a"

    @pytest.mark.asyncio
    async def test_rejection_raises_remote_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(403, "Invalid transition", "invalidTransition")

        with pytest.raises(RemoteTransitionFailure) as exc:
            await _api(handler).transition("a", BroadcastLifecycle.COMPLETE)

        assert exc.value.status_code == 403
        assert exc.value.target == "complete"
        assert "invalidTransition" in str(exc.value)

    @pytest.mark.asyncio
    async def test_ready_is_not_a_transition_target(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(ValueError):
            await _api(handler).transition("a", BroadcastLifecycle.READY)

    @pytest.mark.asyncio
    async def test_missing_token_raises_remote_failure(self) -> None:
        class NoToken(CredentialsProvider):
            async def get_access_token(self) -> str:
                raise YouTubeAuthError("ENV VAR NOT FOUND: YOUTUBE_ACCESS_TOKEN")

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        api = YouTubeBroadcastAPI(
            credentials=NoToken(),
            base_url="https://yt.test/youtube/v3",
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(RemoteTransitionFailure, match="ENV VAR NOT FOUND"):
            await api.transition("a", BroadcastLifecycle.LIVE)

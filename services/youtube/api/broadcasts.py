from typing import Any, Dict, Iterable, List, Optional

import httpx

from core.errors import RemoteTransitionFailure
from services.youtube.api.errors import YouTubeAPIError, error_reason
from services.youtube.auth import CredentialsProvider, YouTubeAuthError
from services.youtube.models.broadcast import (
    BroadcastStatusUpdate,
    normalize_broadcast,
    normalize_status,
    normalize_stream,
)
from shared.broadcasts.models import Broadcast, BroadcastLifecycle, Stream
from shared.logging.logger import get_logger

log = get_logger("youtube.broadcasts")

# liveBroadcasts.list / liveStreams.list accept at most 50 ids per call
MAX_IDS_PER_CALL = 50


class YouTubeBroadcastAPI:
    """
    Broadcast lifecycle client for the YouTube Data API v3.

    Responsibilities:
    - List every broadcast owned by the authenticated channel
    - Fetch lifecycle status and stream health for known ids
    - Request lifecycle transitions (testing / live / complete)

    Listing errors raise YouTubeAPIError; rejected transitions raise
    RemoteTransitionFailure. Nothing is retried here.
    """

    BROADCAST_PARTS = "id,snippet,contentDetails,status"
    STATUS_PARTS = "id,snippet,status"
    STREAM_PARTS = "id,status"

    def __init__(
        self,
        *,
        credentials: CredentialsProvider,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout: float = 15.0,
        page_size: int = 50,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if credentials is None:
            raise RuntimeError("YouTube credentials provider is required")

        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport

    # ------------------------------------------------------------

    async def _client(self) -> httpx.AsyncClient:
        token = await self.credentials.get_access_token()
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {token}"},
            transport=self._transport,
        )

    async def _get(
        self, client: httpx.AsyncClient, path: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        try:
            r = await client.get(path, params=params)
        except httpx.HTTPError as e:
            raise YouTubeAPIError(f"YouTube {path} request error: {e}") from e

        if r.is_error:
            reason = error_reason(r)
            raise YouTubeAPIError(
                f"YouTube {path} request failed: {reason}",
                status_code=r.status_code,
                reason=reason,
            )

        try:
            data = r.json()
        except ValueError as e:
            raise YouTubeAPIError(f"YouTube {path} returned invalid JSON") from e

        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------
    # Broadcast listing
    # ------------------------------------------------------------

    async def list_broadcasts(self) -> List[Broadcast]:
        """
        Return every broadcast of the channel, all lifecycle states, in the
        order the API reports them.
        """
        params: Dict[str, Any] = {
            "part": self.BROADCAST_PARTS,
            "mine": "true",
            "broadcastType": "all",
            "maxResults": self.page_size,
        }

        broadcasts: List[Broadcast] = []
        async with await self._client() as client:
            while True:
                data = await self._get(client, "/liveBroadcasts", params)

                for item in data.get("items", []):
                    broadcast = normalize_broadcast(item)
                    if broadcast:
                        broadcasts.append(broadcast)

                page_token = data.get("nextPageToken")
                if not page_token:
                    break
                params["pageToken"] = page_token

        log.debug(f"[YouTube] Broadcast query returned {len(broadcasts)} item(s)")
        return broadcasts

    async def list_broadcast_statuses(
        self, ids: Iterable[str]
    ) -> List[BroadcastStatusUpdate]:
        """
        Return lifecycle status (and actual start) for the given ids only.
        """
        updates: List[BroadcastStatusUpdate] = []
        async with await self._client() as client:
            for chunk in _chunks(ids):
                data = await self._get(
                    client,
                    "/liveBroadcasts",
                    {"part": self.STATUS_PARTS, "id": ",".join(chunk)},
                )
                for item in data.get("items", []):
                    update = normalize_status(item)
                    if update:
                        updates.append(update)
        return updates

    # ------------------------------------------------------------
    # Stream health
    # ------------------------------------------------------------

    async def list_streams(self, ids: Iterable[str]) -> List[Stream]:
        streams: List[Stream] = []
        async with await self._client() as client:
            for chunk in _chunks(ids):
                data = await self._get(
                    client,
                    "/liveStreams",
                    {"part": self.STREAM_PARTS, "id": ",".join(chunk)},
                )
                for item in data.get("items", []):
                    stream = normalize_stream(item)
                    if stream:
                        streams.append(stream)
        return streams

    # ------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------

    async def transition(self, broadcast_id: str, target: BroadcastLifecycle) -> None:
        """
        Ask YouTube to move a broadcast to `target`.

        Raises RemoteTransitionFailure when the call is rejected, e.g. for an
        illegal source state ("Invalid transition") or a stream that is not
        active yet.
        """
        if target == BroadcastLifecycle.READY:
            raise ValueError("Broadcasts cannot be transitioned back to ready")

        params = {
            "part": "status",
            "id": broadcast_id,
            "broadcastStatus": target.value,
        }

        log.info(f"[{broadcast_id}] Requesting transition to '{target.value}'")

        try:
            async with await self._client() as client:
                r = await client.post("/liveBroadcasts/transition", params=params)
        except YouTubeAuthError as e:
            raise RemoteTransitionFailure(
                broadcast_id, target.value, f"authorization error: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteTransitionFailure(
                broadcast_id, target.value, f"request error: {e}"
            ) from e

        if r.is_error:
            raise RemoteTransitionFailure(
                broadcast_id,
                target.value,
                error_reason(r),
                status_code=r.status_code,
            )

        log.info(f"[{broadcast_id}] Transition to '{target.value}' accepted")


def _chunks(ids: Iterable[str], size: int = MAX_IDS_PER_CALL) -> List[List[str]]:
    unique = list(dict.fromkeys(i for i in ids if i))
    return [unique[i:i + size] for i in range(0, len(unique), size)]

import asyncio
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from core.cache import BroadcastCache
from core.errors import RefreshFailure
from shared.broadcasts.models import Broadcast, StateMemory, Stream, StreamHealth
from shared.logging.logger import get_logger

log = get_logger("core.sync")


class BroadcastSync:
    """
    Reconciles the cache against YouTube.

    Responsibilities:
    - Full reload: re-derive every broadcast and bound stream from the API
    - Feedback refresh: update status/health of already known entries only
    - Build the new snapshot completely before installing it, so a failed
      call leaves the previous cache content authoritative
    """

    def __init__(self, *, api, cache: BroadcastCache):
        self.api = api
        self.cache = cache

    # ------------------------------------------------------------
    # Full reload
    # ------------------------------------------------------------

    async def reload_everything(self) -> StateMemory:
        try:
            fetched = await self.api.list_broadcasts()
            bound_ids = [b.bound_stream_id for b in fetched if b.bound_stream_id]
            streams = await self.api.list_streams(bound_ids) if bound_ids else []
        except Exception as e:
            log.warning(f"Broadcast reload failed; keeping cached data: {e}")
            raise RefreshFailure(f"Broadcast reload failed: {e}") from e

        previous = self.cache.memory
        broadcasts = [_keep_actual_start(b, previous) for b in fetched]
        memory = self.cache.replace(broadcasts, _complete_streams(broadcasts, streams))

        log.info(
            f"Broadcast reload complete (broadcasts={len(memory.broadcasts)}, "
            f"streams={len(memory.streams)})"
        )
        return memory

    # ------------------------------------------------------------
    # Feedback refresh
    # ------------------------------------------------------------

    async def refresh_feedbacks(self) -> StateMemory:
        previous = self.cache.memory
        if not previous.broadcasts:
            log.debug("No cached broadcasts; feedback refresh skipped")
            return previous

        bound_ids = [
            b.bound_stream_id for b in previous.broadcasts.values() if b.bound_stream_id
        ]

        try:
            updates = await self.api.list_broadcast_statuses(list(previous.broadcasts))
            streams = await self.api.list_streams(bound_ids) if bound_ids else []
        except Exception as e:
            log.warning(f"Feedback refresh failed; keeping cached data: {e}")
            raise RefreshFailure(f"Feedback refresh failed: {e}") from e

        # Apply onto the latest snapshot; a reload may have landed meanwhile.
        # Status only moves forward, so a stale response never rolls it back.
        current = self.cache.memory
        by_id = {u.id: u for u in updates}
        broadcasts: List[Broadcast] = []
        for broadcast in current.broadcasts.values():
            update = by_id.get(broadcast.id)
            if update is None or update.status.rank < broadcast.status.rank:
                broadcasts.append(broadcast)
                continue
            broadcasts.append(
                replace(
                    broadcast,
                    status=update.status,
                    actual_start_time=update.actual_start_time
                    or broadcast.actual_start_time,
                )
            )

        health: Dict[str, Stream] = dict(current.streams)
        health.update({s.id: s for s in streams})

        memory = self.cache.replace(
            broadcasts, _complete_streams(broadcasts, health.values())
        )
        log.debug(f"Feedback refresh complete ({len(updates)} status update(s))")
        return memory

    # ------------------------------------------------------------
    # Background polling
    # ------------------------------------------------------------

    async def poll_feedbacks(
        self,
        stop_event: asyncio.Event,
        interval: float,
    ) -> None:
        """
        Refresh feedbacks every `interval` seconds until `stop_event` is set.
        Failures are logged; polling continues.
        """
        log.info(f"Feedback polling started (interval={interval}s)")

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break

            try:
                await self.refresh_feedbacks()
            except RefreshFailure as e:
                log.warning(f"Feedback poll error: {e}")
            except Exception as e:
                log.error(f"Unexpected feedback poll error: {e}")

        log.info("Feedback polling stopped")


def _keep_actual_start(broadcast: Broadcast, previous: StateMemory) -> Broadcast:
    if broadcast.actual_start_time is not None:
        return broadcast
    known: Optional[Broadcast] = previous.broadcasts.get(broadcast.id)
    if known is None or known.actual_start_time is None:
        return broadcast
    return replace(broadcast, actual_start_time=known.actual_start_time)


def _complete_streams(
    broadcasts: Iterable[Broadcast], streams: Iterable[Stream]
) -> List[Stream]:
    """
    Keep only streams bound to a broadcast and add a NO_DATA entry for every
    bound stream the API did not return.
    """
    by_id = {s.id: s for s in streams}
    result: Dict[str, Stream] = {}
    for broadcast in broadcasts:
        stream_id = broadcast.bound_stream_id
        if not stream_id or stream_id in result:
            continue
        result[stream_id] = by_id.get(stream_id) or Stream(
            id=stream_id, health=StreamHealth.NO_DATA
        )
    return list(result.values())
